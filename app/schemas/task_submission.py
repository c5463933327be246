"""Task submission schemas."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.task import TaskPriority, TaskType
from app.models.task_submission import SubmissionStatus
from app.schemas.base import PaginationMeta, UserSummary
from app.utils.time import to_naive_utc


class TaskSubmissionCreate(BaseModel):
    task_id: str
    submission_data: Dict[str, Any] = Field(..., description="Payload keyed by task type")
    notes: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    time_taken: Optional[int] = Field(default=None, ge=0, description="Minutes")
    difficulty_rating: Optional[int] = Field(default=None, ge=1, le=10)
    satisfaction_rating: Optional[int] = Field(default=None, ge=1, le=10)


class QuickSubmission(BaseModel):
    """One-tap completion; wrapped into a ``custom`` payload."""
    task_id: str
    completed: bool = True
    notes: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=10)


class SubmissionReview(BaseModel):
    status: SubmissionStatus
    coach_feedback: Optional[str] = None
    coach_rating: Optional[int] = Field(default=None, ge=1, le=10)
    points_awarded: Optional[int] = Field(default=None, ge=0)

    @field_validator("status")
    @classmethod
    def not_submitted(cls, value: SubmissionStatus) -> SubmissionStatus:
        if value == SubmissionStatus.submitted:
            raise ValueError("A review must approve, reject or request revision")
        return value


class SubmissionFilters(BaseModel):
    task_id: Optional[str] = None
    trainee_id: Optional[str] = None
    status: Optional[SubmissionStatus] = None
    review_required: Optional[bool] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class TaskReference(BaseModel):
    id: str
    title: str
    task_type: TaskType


class TaskSubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    task: Optional[TaskReference] = None
    submitted_by_id: str
    submitted_by: Optional[UserSummary] = None
    status: SubmissionStatus
    submission_data: Dict[str, Any]
    notes: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    time_taken: Optional[int] = None
    difficulty_rating: Optional[int] = None
    satisfaction_rating: Optional[int] = None
    reviewed_by: Optional[UserSummary] = None
    coach_feedback: Optional[str] = None
    coach_rating: Optional[int] = None
    points_awarded: int
    is_latest: bool
    submission_number: int
    created_at: datetime
    updated_at: datetime
    reviewed_at: Optional[datetime] = None


class TaskSubmissionListResponse(PaginationMeta):
    submissions: List[TaskSubmissionResponse]


BulkAction = Literal["complete", "cancel", "extend_due_date", "change_priority"]


class BulkActionData(BaseModel):
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    notes: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def normalise_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class BulkTaskAction(BaseModel):
    task_ids: List[str] = Field(..., min_length=1)
    action: BulkAction
    action_data: Optional[BulkActionData] = None

    @model_validator(mode="after")
    def check_action_data(self) -> "BulkTaskAction":
        data = self.action_data or BulkActionData()
        if self.action == "extend_due_date" and data.due_date is None:
            raise ValueError("action_data.due_date is required for extend_due_date")
        if self.action == "change_priority" and data.priority is None:
            raise ValueError("action_data.priority is required for change_priority")
        return self


class BulkItemFailure(BaseModel):
    task_id: str
    error: str


class BulkActionResult(BaseModel):
    """Per-item outcome of a bulk action; partial success is a normal result."""
    succeeded: List[str] = Field(default_factory=list)
    failures: List[BulkItemFailure] = Field(default_factory=list)

    @property
    def success(self) -> int:
        return len(self.succeeded)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def errors(self) -> List[str]:
        return [failure.error for failure in self.failures]


class BulkActionResponse(BaseModel):
    success: int
    failed: int
    errors: List[str]
    succeeded: List[str]
    failures: List[BulkItemFailure]

    @classmethod
    def from_result(cls, result: BulkActionResult) -> "BulkActionResponse":
        return cls(
            success=result.success,
            failed=result.failed,
            errors=result.errors,
            succeeded=result.succeeded,
            failures=result.failures,
        )
