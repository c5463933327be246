"""Pydantic schemas for request and response validation."""

# Task schemas
from .task import (
    HomepageTasks,
    RecurrencePattern,
    ReminderSettings,
    TaskCreate,
    TaskFilters,
    TaskListResponse,
    TaskResponse,
    TaskSummary,
    TaskTypeInfo,
    TaskUpdate,
)

# Submission schemas
from .task_submission import (
    BulkActionResponse,
    BulkActionResult,
    BulkTaskAction,
    QuickSubmission,
    SubmissionFilters,
    SubmissionReview,
    TaskSubmissionCreate,
    TaskSubmissionListResponse,
    TaskSubmissionResponse,
)

# Template schemas
from .template import (
    TargetCriteria,
    TemplateCreate,
    TemplateFilters,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)

# Assignment and recommendation schemas
from .template_assignment import (
    AssignmentFilters,
    AssignmentProgressUpdate,
    AssignmentUpdate,
    RecommendationDismiss,
    TemplateAssign,
    TemplateAssignmentListResponse,
    TemplateAssignmentResponse,
    TemplateRecommendationListResponse,
    TemplateRecommendationResponse,
)
