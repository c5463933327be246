"""Task API endpoints.

Coaches create, edit and review tasks; trainees list and submit them. The
caller's role decides which rows are visible.
"""

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import (
    get_current_admin,
    get_current_coach,
    get_current_trainee,
    get_db,
    get_task_participant,
)
from app.core.config import settings
from app.models.task import TaskFrequency, TaskPriority, TaskStatus, TaskType
from app.models.task_submission import SubmissionStatus
from app.models.user import User
from app.schemas.task import (
    HomepageTasks,
    OverdueUpdateResponse,
    TaskCreate,
    TaskFilters,
    TaskListResponse,
    TaskResponse,
    TaskSummary,
    TaskTypeInfo,
    TaskUpdate,
)
from app.schemas.task_submission import (
    BulkActionResponse,
    BulkTaskAction,
    QuickSubmission,
    SubmissionFilters,
    SubmissionReview,
    TaskSubmissionCreate,
    TaskSubmissionListResponse,
    TaskSubmissionResponse,
)
from app.services.task import TaskService
from app.utils.logger import api_logger

router = APIRouter()


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Create a task (and any recurring siblings) for a trainee."""
    return TaskService.create_task(db, current_user.id, task_data)


@router.get("/", response_model=TaskListResponse)
def get_tasks(
    trainee_id: Optional[str] = Query(None, description="Coach/admin only: restrict to one trainee"),
    task_type: Optional[TaskType] = Query(None),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    frequency: Optional[TaskFrequency] = Query(None),
    tags: Optional[List[str]] = Query(None, description="Match any of these tags"),
    due_date_from: Optional[datetime] = Query(None),
    due_date_to: Optional[datetime] = Query(None),
    is_overdue: Optional[bool] = Query(None),
    requires_approval: Optional[bool] = Query(None),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
    sort_by: Literal["title", "due_date", "priority", "status", "created_at"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    """List tasks visible to the caller."""
    filters = TaskFilters(
        trainee_id=trainee_id,
        task_type=task_type,
        status=task_status,
        priority=priority,
        frequency=frequency,
        tags=tags,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
        is_overdue=is_overdue,
        requires_approval=requires_approval,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return TaskService.get_tasks(db, current_user.id, current_user.role, filters)


@router.get("/summary", response_model=TaskSummary)
def get_task_summary(
    trainee_id: Optional[str] = Query(None, description="Coach/admin only: summarise one trainee"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    return TaskService.get_task_summary(db, current_user.id, current_user.role, trainee_id)


@router.get("/homepage", response_model=HomepageTasks)
def get_homepage_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    """Urgent, due-today, recent and in-progress tasks, five of each."""
    return TaskService.get_homepage_tasks(db, current_user.id, current_user.role)


@router.get("/types/list", response_model=List[TaskTypeInfo])
def list_task_types(current_user: User = Depends(get_task_participant)):
    return TaskService.list_task_types()


@router.get("/submissions", response_model=TaskSubmissionListResponse)
def get_task_submissions(
    task_id: Optional[str] = Query(None),
    trainee_id: Optional[str] = Query(None),
    submission_status: Optional[SubmissionStatus] = Query(None, alias="status"),
    review_required: Optional[bool] = Query(None, description="Only submissions awaiting review"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    filters = SubmissionFilters(
        task_id=task_id,
        trainee_id=trainee_id,
        status=submission_status,
        review_required=review_required,
        page=page,
        page_size=page_size,
    )
    return TaskService.get_task_submissions(db, current_user.id, current_user.role, filters)


@router.post("/submit", response_model=TaskSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_task(
    submission_data: TaskSubmissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_trainee),
):
    """Submit a type-specific payload for one of the caller's tasks."""
    return TaskService.submit_task(db, current_user.id, submission_data)


@router.post("/quick-submit", response_model=TaskSubmissionResponse, status_code=status.HTTP_201_CREATED)
def quick_submit_task(
    quick_data: QuickSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_trainee),
):
    return TaskService.quick_submit_task(db, current_user.id, quick_data)


@router.post("/submissions/{submission_id}/review", response_model=TaskSubmissionResponse)
def review_submission(
    submission_id: str,
    review: SubmissionReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    return TaskService.review_submission(db, submission_id, current_user.id, review)


@router.post("/bulk", response_model=BulkActionResponse)
def bulk_task_action(
    action: BulkTaskAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    """
    Apply one action to several tasks.

    Always answers 200; per-task failures are listed in the response.
    """
    result = TaskService.bulk_task_action(db, current_user.id, current_user.role, action)
    return BulkActionResponse.from_result(result)


@router.post("/admin/update-overdue", response_model=OverdueUpdateResponse)
def update_overdue_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    updated = TaskService.update_overdue_tasks(db)
    api_logger.info("Overdue sweep requested", "admin", admin_id=current_user.id, updated=updated)
    return OverdueUpdateResponse(updated=updated)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_task_participant),
):
    return TaskService.get_task_by_id(db, task_id, current_user.id, current_user.role)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    return TaskService.update_task(db, task_id, current_user.id, task_data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Delete a task that has no submissions."""
    TaskService.delete_task(db, task_id, current_user.id)
