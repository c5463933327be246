"""
Task lifecycle service.

Coaches create tasks for trainees, trainees submit against them and coaches
review the submissions. Stored status moves pending -> in_progress ->
completed, or to cancelled; nothing leaves completed or cancelled. Overdue is
derived when reading and only persisted by :meth:`TaskService.update_overdue_tasks`.
"""

import math
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import String, case, cast, func, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.task import Task, TaskFrequency, TaskPriority, TaskStatus, TaskType
from app.models.task_submission import SubmissionStatus, TaskSubmission
from app.models.user import User, UserRole
from app.schemas.base import PaginationMeta, UserSummary
from app.schemas.task import (
    HomepageTasks,
    TaskCreate,
    TaskFilters,
    TaskListResponse,
    TaskListSummary,
    TaskResponse,
    TaskSummary,
    TaskTypeInfo,
    TaskUpdate,
)
from app.schemas.task_payloads import PayloadError, validate_submission_data, validate_task_config
from app.schemas.task_submission import (
    BulkActionResult,
    BulkItemFailure,
    BulkTaskAction,
    QuickSubmission,
    SubmissionFilters,
    SubmissionReview,
    TaskReference,
    TaskSubmissionCreate,
    TaskSubmissionListResponse,
    TaskSubmissionResponse,
)
from app.services.base import TransactionManager, paginate
from app.utils.logger import task_logger
from app.utils.time import add_months, as_date, end_of_day, start_of_day, utcnow

DEFAULT_TASK_POINTS: Mapping[TaskType, int] = MappingProxyType({
    TaskType.workout: 50,
    TaskType.meal_log: 30,
    TaskType.weight_check: 20,
    TaskType.progress_photo: 40,
    TaskType.measurement: 25,
    TaskType.habit_tracking: 35,
    TaskType.reflection: 25,
    TaskType.education: 30,
    TaskType.goal_setting: 40,
    TaskType.custom: 20,
})

TASK_TYPE_INFO: Mapping[TaskType, Tuple[str, str]] = MappingProxyType({
    TaskType.workout: ("Workout", "Complete a specific workout routine"),
    TaskType.meal_log: ("Meal Log", "Log meals and track nutrition"),
    TaskType.weight_check: ("Weight Check", "Record body weight measurement"),
    TaskType.progress_photo: ("Progress Photo", "Take progress photos for tracking"),
    TaskType.measurement: ("Measurement", "Record body measurements"),
    TaskType.habit_tracking: ("Habit Tracking", "Track daily habits and behaviors"),
    TaskType.reflection: ("Reflection", "Complete reflection questions"),
    TaskType.education: ("Education", "Complete educational content"),
    TaskType.goal_setting: ("Goal Setting", "Set and review goals"),
    TaskType.custom: ("Custom", "Custom task defined by coach"),
})

TERMINAL_STATUSES = frozenset({TaskStatus.completed, TaskStatus.cancelled})
OPEN_STATUSES = (TaskStatus.pending, TaskStatus.in_progress)

PRIORITY_ORDER = case(
    (Task.priority == TaskPriority.low, 1),
    (Task.priority == TaskPriority.medium, 2),
    (Task.priority == TaskPriority.high, 3),
    (Task.priority == TaskPriority.urgent, 4),
    else_=0,
)

HOMEPAGE_LIMIT = 5

# Columns copied from a parent task onto its recurring siblings
_RECURRING_COPY_FIELDS = (
    "title", "description", "task_type", "coach_id", "trainee_id", "priority",
    "frequency", "start_date", "estimated_minutes", "task_config", "instructions",
    "tags", "points", "is_visible", "requires_approval", "max_submissions",
    "allow_late_submission", "reminder_settings", "recurrence_pattern",
)


def generate_recurrence_dates(
    due_date: datetime,
    frequency: TaskFrequency,
    pattern: Mapping[str, Any],
    max_total: Optional[int] = None,
) -> List[Tuple[int, datetime]]:
    """
    Compute ``(sequence_number, due_date)`` pairs for the siblings of a
    recurring task whose own due date is ``due_date`` (sequence 1).

    Dates advance from the parent's due date by ``interval * i`` days, weeks
    or months, stop after ``end_date`` and skip any calendar date listed in
    ``exceptions``. At most ``max_total`` tasks exist in the series, parent
    included.
    """
    if frequency not in (TaskFrequency.daily, TaskFrequency.weekly, TaskFrequency.monthly):
        return []

    hard_cap = max_total or settings.MAX_RECURRING_TASKS
    cap = min(pattern.get("max_occurrences") or hard_cap, hard_cap)
    interval = pattern.get("interval") or 1
    end_date = pattern.get("end_date")
    exceptions = {as_date(item) for item in pattern.get("exceptions") or []}

    dates = []
    for i in range(1, cap):
        if frequency == TaskFrequency.daily:
            next_due = due_date + timedelta(days=interval * i)
        elif frequency == TaskFrequency.weekly:
            next_due = due_date + timedelta(days=interval * 7 * i)
        else:
            next_due = add_months(due_date, interval * i)

        if end_date is not None and next_due > end_date:
            break
        if next_due.date() in exceptions:
            continue
        dates.append((i + 1, next_due))
    return dates


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.full_name or user.email, email=user.email)


def task_to_response(task: Task, submission_count: int, now: Optional[datetime] = None) -> TaskResponse:
    """Map a task row to its response shape, deriving overdue fields at ``now``."""
    now = now or utcnow()
    data = {column.name: getattr(task, column.name) for column in Task.__table__.columns}

    is_overdue = bool(task.due_date and task.due_date < now and task.status != TaskStatus.completed)
    days_until_due = None
    if task.due_date is not None:
        days_until_due = math.ceil((task.due_date - now).total_seconds() / 86400)

    data.update(
        tags=task.tags or [],
        coach=user_summary(task.coach),
        trainee=user_summary(task.trainee),
        status=TaskStatus.overdue if is_overdue else task.status,
        is_overdue=is_overdue,
        days_until_due=days_until_due,
        submission_count=submission_count,
    )
    return TaskResponse.model_validate(data)


def submission_to_response(submission: TaskSubmission) -> TaskSubmissionResponse:
    data = {column.name: getattr(submission, column.name) for column in TaskSubmission.__table__.columns}
    task = submission.task
    data.update(
        attachments=submission.attachments or [],
        task=TaskReference(id=task.id, title=task.title, task_type=task.task_type) if task else None,
        submitted_by=user_summary(submission.submitted_by),
        reviewed_by=user_summary(submission.reviewed_by),
    )
    return TaskSubmissionResponse.model_validate(data)


class TaskService:
    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _scope_criteria(user_id: str, role: UserRole, trainee_id: Optional[str] = None) -> list:
        """Row-level visibility: coaches see their tasks, trainees their visible ones."""
        criteria = []
        if role == UserRole.coach:
            criteria.append(Task.coach_id == user_id)
            if trainee_id:
                criteria.append(Task.trainee_id == trainee_id)
        elif role == UserRole.trainee:
            criteria.append(Task.trainee_id == user_id)
            criteria.append(Task.is_visible.is_(True))
        elif trainee_id:
            criteria.append(Task.trainee_id == trainee_id)
        return criteria

    @staticmethod
    def _submission_counts(db: Session, task_ids: Iterable[str]) -> Dict[str, int]:
        task_ids = list(task_ids)
        if not task_ids:
            return {}
        rows = (
            db.query(TaskSubmission.task_id, func.count(TaskSubmission.id))
            .filter(TaskSubmission.task_id.in_(task_ids))
            .group_by(TaskSubmission.task_id)
            .all()
        )
        return {task_id: count for task_id, count in rows}

    @classmethod
    def _to_responses(cls, db: Session, tasks: List[Task]) -> List[TaskResponse]:
        counts = cls._submission_counts(db, [task.id for task in tasks])
        now = utcnow()
        return [task_to_response(task, counts.get(task.id, 0), now) for task in tasks]

    @staticmethod
    def _get_user_with_role(db: Session, user_id: str, role: UserRole, label: str) -> User:
        user = db.query(User).filter(User.id == user_id, User.role == role).first()
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        return user

    @staticmethod
    def _check_config(task_type: TaskType, config: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        try:
            return validate_task_config(task_type, config)
        except PayloadError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    @staticmethod
    def _complete(task: Task, completed_by: str, **completion) -> None:
        now = utcnow()
        task.status = TaskStatus.completed
        task.completed_at = now
        task.completion_data = {
            "completed_at": now.isoformat(),
            "completed_by": completed_by,
            **{key: value for key, value in completion.items() if value is not None},
        }

    # ------------------------------------------------------------------
    # create / read
    # ------------------------------------------------------------------

    @classmethod
    def create_task(cls, db: Session, coach_id: str, task_data: TaskCreate) -> TaskResponse:
        """
        Create a task, plus its recurring siblings when a recurrence pattern
        and due date are supplied. The whole series is written in one
        transaction.
        """
        cls._get_user_with_role(db, coach_id, UserRole.coach, "Coach")
        cls._get_user_with_role(db, task_data.trainee_id, UserRole.trainee, "Trainee")
        task_config = cls._check_config(task_data.task_type, task_data.task_config)

        recurrence = task_data.recurrence_pattern
        task = Task(
            title=task_data.title,
            description=task_data.description,
            task_type=task_data.task_type,
            coach_id=coach_id,
            trainee_id=task_data.trainee_id,
            priority=task_data.priority,
            status=TaskStatus.pending,
            frequency=task_data.frequency,
            due_date=task_data.due_date,
            start_date=task_data.start_date or utcnow(),
            estimated_minutes=task_data.estimated_minutes,
            task_config=task_config,
            instructions=task_data.instructions,
            tags=list(task_data.tags),
            points=task_data.points if task_data.points is not None else DEFAULT_TASK_POINTS[task_data.task_type],
            is_visible=task_data.is_visible,
            requires_approval=task_data.requires_approval,
            max_submissions=task_data.max_submissions,
            allow_late_submission=task_data.allow_late_submission,
            reminder_settings=task_data.reminder_settings.model_dump(mode="json") if task_data.reminder_settings else None,
            recurrence_pattern=recurrence.model_dump(mode="json") if recurrence else None,
            sequence_number=1,
        )

        sibling_dates: List[Tuple[int, datetime]] = []
        if task_data.frequency != TaskFrequency.once and recurrence and task_data.due_date:
            sibling_dates = generate_recurrence_dates(
                task_data.due_date, task_data.frequency, recurrence.model_dump()
            )

        with TransactionManager(db):
            db.add(task)
            db.flush()
            for sequence_number, due_date in sibling_dates:
                sibling = Task(**{name: getattr(task, name) for name in _RECURRING_COPY_FIELDS})
                sibling.status = TaskStatus.pending
                sibling.due_date = due_date
                sibling.parent_task_id = task.id
                sibling.sequence_number = sequence_number
                db.add(sibling)

        db.refresh(task)
        task_logger.success(
            f"Created {task.task_type.value} task",
            "create",
            task_id=task.id,
            coach_id=coach_id,
            trainee_id=task.trainee_id,
            recurring=len(sibling_dates),
        )
        return task_to_response(task, 0)

    @staticmethod
    def _filter_criteria(filters: TaskFilters) -> List[Any]:
        criteria = []
        if filters.task_type:
            criteria.append(Task.task_type == filters.task_type)
        if filters.status:
            criteria.append(Task.status == filters.status)
        if filters.priority:
            criteria.append(Task.priority == filters.priority)
        if filters.frequency:
            criteria.append(Task.frequency == filters.frequency)
        if filters.tags:
            # tags is a JSON array; match the serialised element
            tags_text = cast(Task.tags, String)
            criteria.append(or_(*[tags_text.like(f'%"{tag}"%') for tag in filters.tags]))
        if filters.due_date_from:
            criteria.append(Task.due_date >= filters.due_date_from)
        if filters.due_date_to:
            criteria.append(Task.due_date <= filters.due_date_to)
        if filters.is_overdue is not None:
            overdue = (Task.due_date < utcnow()) & (Task.status != TaskStatus.completed)
            criteria.append(overdue if filters.is_overdue else ~overdue | Task.due_date.is_(None))
        if filters.requires_approval is not None:
            criteria.append(Task.requires_approval.is_(filters.requires_approval))
        return criteria

    @classmethod
    def get_tasks(cls, db: Session, user_id: str, role: UserRole, filters: TaskFilters) -> TaskListResponse:
        """List tasks visible to the caller; the embedded summary covers the same filtered set."""
        filter_criteria = cls._filter_criteria(filters)
        query = db.query(Task).filter(*cls._scope_criteria(user_id, role, filters.trainee_id), *filter_criteria)

        sort_columns = {
            "title": Task.title,
            "due_date": Task.due_date,
            "priority": PRIORITY_ORDER,
            "status": Task.status,
            "created_at": Task.created_at,
        }
        column = sort_columns[filters.sort_by]
        query = query.order_by(column.asc() if filters.sort_order == "asc" else column.desc(), Task.id)

        tasks, total_count = paginate(query, filters.page, filters.page_size)
        summary = cls.get_task_summary(
            db, user_id, role, trainee_id=filters.trainee_id, extra_criteria=filter_criteria
        )
        meta = PaginationMeta.build(total_count, filters.page, filters.page_size)

        return TaskListResponse(
            **meta.model_dump(),
            tasks=cls._to_responses(db, tasks),
            summary=TaskListSummary(
                pending=summary.pending,
                in_progress=summary.in_progress,
                completed=summary.completed,
                overdue=summary.overdue,
                total_points=summary.total_points,
                completion_rate=summary.completion_rate,
            ),
        )

    @classmethod
    def get_task_by_id(cls, db: Session, task_id: str, user_id: str, role: UserRole) -> TaskResponse:
        task = (
            db.query(Task)
            .filter(Task.id == task_id, *cls._scope_criteria(user_id, role))
            .first()
        )
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
        return cls._to_responses(db, [task])[0]

    @staticmethod
    def calculate_streaks(completion_days: Iterable, today) -> Tuple[int, int]:
        """Return ``(current, longest)`` runs of consecutive completion days."""
        days = sorted(set(completion_days))
        longest = run = 0
        previous = None
        for day in days:
            run = run + 1 if previous is not None and (day - previous).days == 1 else 1
            longest = max(longest, run)
            previous = day

        current = 0
        day_set = set(days)
        cursor = today
        while cursor in day_set:
            current += 1
            cursor -= timedelta(days=1)
        return current, longest

    @classmethod
    def get_task_summary(
        cls,
        db: Session,
        user_id: str,
        role: UserRole,
        trainee_id: Optional[str] = None,
        extra_criteria: Iterable[Any] = (),
    ) -> TaskSummary:
        criteria = [*cls._scope_criteria(user_id, role, trainee_id), *extra_criteria]
        base = db.query(Task).filter(*criteria)

        counts = dict(
            db.query(Task.status, func.count(Task.id)).filter(*criteria).group_by(Task.status).all()
        )
        total = sum(counts.values())
        completed = counts.get(TaskStatus.completed, 0)

        total_points = db.query(func.coalesce(func.sum(Task.points), 0)).filter(*criteria).scalar()
        points_earned = (
            db.query(func.coalesce(func.sum(TaskSubmission.points_awarded), 0))
            .join(Task, TaskSubmission.task_id == Task.id)
            .filter(*criteria, TaskSubmission.status == SubmissionStatus.approved)
            .scalar()
        )
        average_rating = (
            db.query(func.avg(TaskSubmission.satisfaction_rating))
            .join(Task, TaskSubmission.task_id == Task.id)
            .filter(*criteria, TaskSubmission.satisfaction_rating.isnot(None))
            .scalar()
        )

        now = utcnow()
        open_tasks = base.filter(Task.status.in_(OPEN_STATUSES))
        due_today = open_tasks.filter(Task.due_date.between(start_of_day(now), end_of_day(now))).count()
        due_this_week = open_tasks.filter(Task.due_date.between(now, now + timedelta(days=7))).count()

        completion_days = [
            completed_at.date()
            for (completed_at,) in base.filter(
                Task.status == TaskStatus.completed, Task.completed_at.isnot(None)
            ).with_entities(Task.completed_at)
        ]
        current_streak, longest_streak = cls.calculate_streaks(completion_days, now.date())

        return TaskSummary(
            total=total,
            pending=counts.get(TaskStatus.pending, 0),
            in_progress=counts.get(TaskStatus.in_progress, 0),
            completed=completed,
            overdue=counts.get(TaskStatus.overdue, 0),
            total_points=int(total_points or 0),
            points_earned=int(points_earned or 0),
            completion_rate=round(completed / total * 100) if total else 0,
            average_rating=round(float(average_rating), 2) if average_rating is not None else None,
            due_today=due_today,
            due_this_week=due_this_week,
            current_streak=current_streak,
            longest_streak=longest_streak,
        )

    @classmethod
    def get_homepage_tasks(cls, db: Session, user_id: str, role: UserRole) -> HomepageTasks:
        base = db.query(Task).filter(*cls._scope_criteria(user_id, role))
        open_tasks = base.filter(Task.status.in_(OPEN_STATUSES))
        now = utcnow()

        urgent = (
            open_tasks.filter(Task.priority.in_((TaskPriority.high, TaskPriority.urgent)))
            .order_by(Task.due_date.asc())
            .limit(HOMEPAGE_LIMIT)
            .all()
        )
        due_today = (
            open_tasks.filter(Task.due_date.between(start_of_day(now), end_of_day(now)))
            .order_by(Task.due_date.asc())
            .limit(HOMEPAGE_LIMIT)
            .all()
        )
        recent = base.order_by(Task.created_at.desc()).limit(HOMEPAGE_LIMIT).all()
        in_progress = (
            base.filter(Task.status == TaskStatus.in_progress)
            .order_by(Task.updated_at.desc())
            .limit(HOMEPAGE_LIMIT)
            .all()
        )

        return HomepageTasks(
            urgent=cls._to_responses(db, urgent),
            due_today=cls._to_responses(db, due_today),
            recent=cls._to_responses(db, recent),
            in_progress=cls._to_responses(db, in_progress),
        )

    @staticmethod
    def list_task_types() -> List[TaskTypeInfo]:
        return [
            TaskTypeInfo(
                type=task_type,
                name=TASK_TYPE_INFO[task_type][0],
                description=TASK_TYPE_INFO[task_type][1],
                default_points=DEFAULT_TASK_POINTS[task_type],
                requires_config=task_type != TaskType.custom,
            )
            for task_type in TaskType
        ]

    # ------------------------------------------------------------------
    # update / delete
    # ------------------------------------------------------------------

    @classmethod
    def update_task(cls, db: Session, task_id: str, coach_id: str, task_data: TaskUpdate) -> TaskResponse:
        task = db.query(Task).filter(Task.id == task_id, Task.coach_id == coach_id).first()
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        update_data = task_data.model_dump(exclude_unset=True)
        new_status = update_data.pop("status", None)
        for field in ("reminder_settings", "recurrence_pattern"):
            if update_data.get(field) is not None:
                update_data[field] = getattr(task_data, field).model_dump(mode="json")

        if "task_config" in update_data:
            update_data["task_config"] = cls._check_config(task.task_type, update_data["task_config"])
        if new_status is not None and new_status != task.status:
            if task.status in TERMINAL_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot change the status of a {task.status.value} task",
                )

        with TransactionManager(db):
            for field, value in update_data.items():
                setattr(task, field, value)

            if new_status == TaskStatus.completed and not task.completed_at:
                cls._complete(task, coach_id, notes="Completed by coach")
            elif new_status is not None:
                task.status = new_status
                if new_status == TaskStatus.in_progress and not task.started_at:
                    task.started_at = utcnow()

        db.refresh(task)
        task_logger.info("Updated task", "update", task_id=task.id, fields=sorted(update_data))
        return cls._to_responses(db, [task])[0]

    @staticmethod
    def delete_task(db: Session, task_id: str, coach_id: str) -> None:
        task = db.query(Task).filter(Task.id == task_id, Task.coach_id == coach_id).first()
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        submission_count = db.query(TaskSubmission).filter(TaskSubmission.task_id == task_id).count()
        if submission_count > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a task that has submissions. Cancel the task instead.",
            )

        with TransactionManager(db):
            db.delete(task)
        task_logger.info("Deleted task", "delete", task_id=task_id, coach_id=coach_id)

    # ------------------------------------------------------------------
    # submissions
    # ------------------------------------------------------------------

    @classmethod
    def submit_task(
        cls,
        db: Session,
        trainee_id: str,
        submission_data: TaskSubmissionCreate,
        allow_custom_payload: bool = False,
    ) -> TaskSubmissionResponse:
        """
        Record a trainee submission.

        The submission insert, the demotion of earlier submissions and the
        task status change are committed together.
        """
        task = (
            db.query(Task)
            .filter(Task.id == submission_data.task_id, Task.trainee_id == trainee_id)
            .first()
        )
        if not task:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

        if task.status in TERMINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot submit to a completed or cancelled task",
            )

        prior_submissions = (
            db.query(TaskSubmission)
            .filter(TaskSubmission.task_id == task.id, TaskSubmission.submitted_by_id == trainee_id)
            .count()
        )
        if prior_submissions >= task.max_submissions:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Maximum submissions ({task.max_submissions}) reached for this task",
            )

        now = utcnow()
        if task.due_date and now > task.due_date and not task.allow_late_submission:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Late submissions are not allowed for this task",
            )

        payload_type = task.task_type
        if allow_custom_payload and set(submission_data.submission_data) == {TaskType.custom.value}:
            payload_type = TaskType.custom
        try:
            payload = validate_submission_data(payload_type, submission_data.submission_data)
        except PayloadError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        with TransactionManager(db):
            db.query(TaskSubmission).filter(
                TaskSubmission.task_id == task.id,
                TaskSubmission.submitted_by_id == trainee_id,
                TaskSubmission.is_latest.is_(True),
            ).update({TaskSubmission.is_latest: False}, synchronize_session="fetch")

            submission = TaskSubmission(
                task_id=task.id,
                submitted_by_id=trainee_id,
                submission_data=payload,
                notes=submission_data.notes,
                attachments=list(submission_data.attachments),
                time_taken=submission_data.time_taken,
                difficulty_rating=submission_data.difficulty_rating,
                satisfaction_rating=submission_data.satisfaction_rating,
                submission_number=prior_submissions + 1,
                is_latest=True,
                points_awarded=0 if task.requires_approval else task.points,
                status=SubmissionStatus.submitted if task.requires_approval else SubmissionStatus.approved,
            )
            db.add(submission)

            if task.status == TaskStatus.pending:
                task.status = TaskStatus.in_progress
                task.started_at = now

            if not task.requires_approval:
                cls._complete(
                    task,
                    trainee_id,
                    time_taken=submission_data.time_taken,
                    rating=submission_data.satisfaction_rating,
                )

        db.refresh(submission)
        task_logger.success(
            "Task submitted",
            "submit",
            task_id=task.id,
            submission_id=submission.id,
            submission_number=submission.submission_number,
            status=submission.status.value,
        )
        return submission_to_response(submission)

    @classmethod
    def quick_submit_task(cls, db: Session, trainee_id: str, quick_data: QuickSubmission) -> TaskSubmissionResponse:
        """Mark a task done without a type-specific payload."""
        submission = TaskSubmissionCreate(
            task_id=quick_data.task_id,
            submission_data={
                "custom": {
                    "text": quick_data.notes or "",
                    "data": {"completed": quick_data.completed, "rating": quick_data.rating},
                }
            },
            notes=quick_data.notes,
            satisfaction_rating=quick_data.rating,
        )
        return cls.submit_task(db, trainee_id, submission, allow_custom_payload=True)

    @classmethod
    def review_submission(
        cls, db: Session, submission_id: str, coach_id: str, review: SubmissionReview
    ) -> TaskSubmissionResponse:
        submission = db.query(TaskSubmission).filter(TaskSubmission.id == submission_id).first()
        if not submission:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")

        task = submission.task
        if task.coach_id != coach_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only review submissions for your tasks",
            )
        if submission.reviewed_at is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Submission has already been reviewed",
            )

        now = utcnow()
        with TransactionManager(db):
            submission.status = review.status
            submission.coach_feedback = review.coach_feedback
            submission.coach_rating = review.coach_rating
            submission.points_awarded = (
                review.points_awarded if review.points_awarded is not None else task.points
            )
            submission.reviewed_by_id = coach_id
            submission.reviewed_at = now

            if review.status == SubmissionStatus.approved and task.status not in TERMINAL_STATUSES:
                cls._complete(task, coach_id, notes="Submission approved", submission_id=submission.id)

        db.refresh(submission)
        task_logger.info(
            f"Submission {review.status.value}",
            "review",
            submission_id=submission.id,
            task_id=task.id,
            points=submission.points_awarded,
        )
        return submission_to_response(submission)

    @staticmethod
    def get_task_submissions(
        db: Session, user_id: str, role: UserRole, filters: SubmissionFilters
    ) -> TaskSubmissionListResponse:
        query = db.query(TaskSubmission).join(Task, TaskSubmission.task_id == Task.id)

        if role == UserRole.coach:
            query = query.filter(Task.coach_id == user_id)
        elif role == UserRole.trainee:
            query = query.filter(TaskSubmission.submitted_by_id == user_id)

        if filters.task_id:
            query = query.filter(TaskSubmission.task_id == filters.task_id)
        if filters.trainee_id:
            query = query.filter(TaskSubmission.submitted_by_id == filters.trainee_id)
        if filters.status:
            query = query.filter(TaskSubmission.status == filters.status)
        if filters.review_required is not None:
            pending_review = TaskSubmission.status == SubmissionStatus.submitted
            query = query.filter(pending_review if filters.review_required else ~pending_review)

        query = query.order_by(TaskSubmission.created_at.desc(), TaskSubmission.submission_number.desc())
        submissions, total_count = paginate(query, filters.page, filters.page_size)
        meta = PaginationMeta.build(total_count, filters.page, filters.page_size)
        return TaskSubmissionListResponse(
            **meta.model_dump(),
            submissions=[submission_to_response(submission) for submission in submissions],
        )

    # ------------------------------------------------------------------
    # batch operations
    # ------------------------------------------------------------------

    @classmethod
    def _apply_bulk_action(cls, task: Task, user_id: str, action: BulkTaskAction) -> None:
        data = action.action_data
        if action.action in ("complete", "cancel") and task.status in TERMINAL_STATUSES:
            raise ValueError(f"task is already {task.status.value}")

        if action.action == "complete":
            cls._complete(task, user_id, notes=data.notes if data else None)
        elif action.action == "cancel":
            task.status = TaskStatus.cancelled
        elif action.action == "extend_due_date":
            task.due_date = data.due_date
        elif action.action == "change_priority":
            task.priority = data.priority

    @classmethod
    def bulk_task_action(cls, db: Session, user_id: str, role: UserRole, action: BulkTaskAction) -> BulkActionResult:
        """
        Apply one action to many tasks, item by item.

        Each task is checked and committed on its own; a failure is recorded
        in the result and the remaining ids are still processed.
        """
        result = BulkActionResult()

        for task_id in action.task_ids:
            task = db.query(Task).filter(Task.id == task_id).first()
            if not task:
                result.failures.append(BulkItemFailure(task_id=task_id, error=f"Task {task_id} not found"))
                continue

            if (role == UserRole.coach and task.coach_id != user_id) or (
                role == UserRole.trainee and task.trainee_id != user_id
            ):
                result.failures.append(BulkItemFailure(task_id=task_id, error=f"No permission for task {task_id}"))
                continue

            try:
                with TransactionManager(db):
                    cls._apply_bulk_action(task, user_id, action)
            except (ValueError, HTTPException) as e:
                message = e.detail if isinstance(e, HTTPException) else str(e)
                result.failures.append(BulkItemFailure(task_id=task_id, error=f"Error with task {task_id}: {message}"))
                continue

            result.succeeded.append(task_id)

        task_logger.info(
            f"Bulk {action.action} finished",
            "bulk",
            user_id=user_id,
            success=result.success,
            failed=result.failed,
        )
        return result

    @staticmethod
    def update_overdue_tasks(db: Session) -> int:
        """Persist ``overdue`` for open tasks past their due date."""
        with TransactionManager(db):
            updated = (
                db.query(Task)
                .filter(Task.due_date < utcnow(), Task.status.in_(OPEN_STATUSES))
                .update({Task.status: TaskStatus.overdue}, synchronize_session=False)
            )
        task_logger.info(f"Marked {updated} task(s) overdue", "overdue", updated=updated)
        return updated
