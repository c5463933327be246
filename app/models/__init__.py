"""Database models."""

# Import all models here to ensure they're recognized by SQLAlchemy
from app.models.task import Task, TaskFrequency, TaskPriority, TaskStatus, TaskType
from app.models.task_submission import SubmissionStatus, TaskSubmission
from app.models.template import DifficultyLevel, Template, TemplateStatus, TemplateType
from app.models.template_assignment import AssignmentStatus, TemplateAssignment
from app.models.template_recommendation import TemplateRecommendation
from app.models.trainee_profile import TraineeProfile
from app.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "TraineeProfile",
    "Task",
    "TaskType",
    "TaskPriority",
    "TaskStatus",
    "TaskFrequency",
    "TaskSubmission",
    "SubmissionStatus",
    "Template",
    "TemplateType",
    "TemplateStatus",
    "DifficultyLevel",
    "TemplateAssignment",
    "AssignmentStatus",
    "TemplateRecommendation",
]
