"""Task schemas.

Pydantic models for creating, updating, filtering and returning tasks.
``task_config`` is accepted as a raw mapping here and checked against the
task type by :mod:`app.schemas.task_payloads` inside the service layer, so a
mismatch is reported as a 400 business-rule error rather than a 422.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.task import TaskFrequency, TaskPriority, TaskStatus, TaskType
from app.schemas.base import PaginationMeta, UserSummary
from app.utils.time import to_naive_utc


class ReminderSettings(BaseModel):
    enabled: bool = True
    before_due: int = Field(default=60, ge=0, description="Minutes before due date")
    frequency: Literal["once", "daily", "hourly"] = "once"
    methods: List[Literal["push", "email", "sms"]] = Field(default_factory=lambda: ["push"])


class RecurrencePattern(BaseModel):
    interval: int = Field(default=1, ge=1, description="Every N days/weeks/months")
    days_of_week: Optional[List[int]] = Field(default=None, description="0=Sunday ... 6=Saturday")
    end_date: Optional[datetime] = None
    max_occurrences: Optional[int] = Field(default=None, ge=1)
    exceptions: List[datetime] = Field(default_factory=list, description="Dates to skip")

    @field_validator("days_of_week")
    @classmethod
    def check_days_of_week(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is not None and any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week entries must be between 0 and 6")
        return value

    @field_validator("end_date")
    @classmethod
    def normalise_end_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @field_validator("exceptions")
    @classmethod
    def normalise_exceptions(cls, value: List[datetime]) -> List[datetime]:
        return [to_naive_utc(item) for item in value]


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    estimated_minutes: Optional[int] = Field(default=None, ge=1)
    instructions: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("due_date", "start_date")
    @classmethod
    def normalise_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskCreate(TaskBase):
    """Schema for creating a task for one trainee."""
    task_type: TaskType
    trainee_id: str = Field(..., description="Trainee the task is assigned to")
    frequency: TaskFrequency = TaskFrequency.once
    task_config: Optional[Dict[str, Any]] = Field(
        default=None, description="Type-specific configuration keyed by task type"
    )
    points: Optional[int] = Field(default=None, ge=0, description="Defaults per task type when omitted")
    is_visible: bool = True
    requires_approval: bool = False
    max_submissions: int = Field(default=1, ge=1)
    allow_late_submission: bool = True
    reminder_settings: Optional[ReminderSettings] = None
    recurrence_pattern: Optional[RecurrencePattern] = None


class TaskUpdate(BaseModel):
    """Schema for updating a task. All fields are optional."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    estimated_minutes: Optional[int] = Field(default=None, ge=1)
    task_config: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    tags: Optional[List[str]] = None
    points: Optional[int] = Field(default=None, ge=0)
    is_visible: Optional[bool] = None
    requires_approval: Optional[bool] = None
    max_submissions: Optional[int] = Field(default=None, ge=1)
    allow_late_submission: Optional[bool] = None
    reminder_settings: Optional[ReminderSettings] = None
    recurrence_pattern: Optional[RecurrencePattern] = None

    @field_validator("due_date", "start_date")
    @classmethod
    def normalise_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @field_validator(
        "title", "priority", "status", "points", "is_visible",
        "requires_approval", "max_submissions", "allow_late_submission",
    )
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskFilters(BaseModel):
    """Query filters for task listings."""
    trainee_id: Optional[str] = None
    task_type: Optional[TaskType] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    frequency: Optional[TaskFrequency] = None
    tags: Optional[List[str]] = None
    due_date_from: Optional[datetime] = None
    due_date_to: Optional[datetime] = None
    is_overdue: Optional[bool] = None
    requires_approval: Optional[bool] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_by: Literal["title", "due_date", "priority", "status", "created_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("due_date_from", "due_date_to")
    @classmethod
    def normalise_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskResponse(BaseModel):
    """Task as returned by the API, with read-time derived fields."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    task_type: TaskType
    coach: Optional[UserSummary] = None
    trainee: Optional[UserSummary] = None
    coach_id: str
    trainee_id: str
    priority: TaskPriority
    status: TaskStatus = Field(..., description="Effective status; overdue when past due and not completed")
    frequency: TaskFrequency
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    estimated_minutes: Optional[int] = None
    task_config: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    points: int
    is_visible: bool
    requires_approval: bool
    max_submissions: int
    allow_late_submission: bool
    reminder_settings: Optional[Dict[str, Any]] = None
    recurrence_pattern: Optional[Dict[str, Any]] = None
    completion_data: Optional[Dict[str, Any]] = None
    submission_count: int = 0
    is_overdue: bool = False
    days_until_due: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    parent_task_id: Optional[str] = None
    sequence_number: int = 1


class TaskListSummary(BaseModel):
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    total_points: int = 0
    completion_rate: int = 0


class TaskListResponse(PaginationMeta):
    """Schema for paginated task list response."""
    tasks: List[TaskResponse]
    summary: TaskListSummary


class TaskSummary(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    total_points: int = 0
    points_earned: int = 0
    completion_rate: int = Field(default=0, description="Completed tasks as a rounded percentage")
    average_rating: Optional[float] = None
    due_today: int = 0
    due_this_week: int = 0
    current_streak: int = Field(default=0, description="Consecutive days ending today with a completed task")
    longest_streak: int = 0


class HomepageTasks(BaseModel):
    urgent: List[TaskResponse]
    due_today: List[TaskResponse]
    recent: List[TaskResponse]
    in_progress: List[TaskResponse]


class TaskTypeInfo(BaseModel):
    type: TaskType
    name: str
    description: str
    default_points: int
    requires_config: bool


class OverdueUpdateResponse(BaseModel):
    updated: int
