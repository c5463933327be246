"""
Unit tests for TaskService.

This module tests the task lifecycle including:
- Creation, default points and recurring series
- Submissions, approvals and reviews
- Read-time overdue derivation and the overdue sweep
- Bulk actions with per-item results
- Summary statistics and streaks

Pure helpers are tested directly; service methods run against an in-memory
SQLite session.
"""

from datetime import date, datetime, timedelta

import pytest
from fastapi import HTTPException, status
from pydantic import ValidationError

from app.models.task import Task, TaskFrequency, TaskPriority, TaskStatus, TaskType
from app.models.task_submission import SubmissionStatus, TaskSubmission
from app.models.user import UserRole
from app.schemas.task import RecurrencePattern, TaskCreate, TaskFilters, TaskUpdate
from app.schemas.task_submission import (
    BulkActionData,
    BulkTaskAction,
    QuickSubmission,
    SubmissionFilters,
    SubmissionReview,
    TaskSubmissionCreate,
)
from app.services.task import (
    DEFAULT_TASK_POINTS,
    TASK_TYPE_INFO,
    TaskService,
    generate_recurrence_dates,
    task_to_response,
)
from app.utils.time import utcnow


def create_workout_task(db, coach, trainee, **overrides):
    data = dict(
        title="Push day",
        task_type=TaskType.workout,
        trainee_id=trainee.id,
        due_date=utcnow() + timedelta(days=1),
        task_config={"workout": {"workout_id": "w-push"}},
    )
    data.update(overrides)
    return TaskService.create_task(db, coach.id, TaskCreate(**data))


def workout_submission(task_id, **overrides):
    data = dict(task_id=task_id, submission_data={"workout": {"duration": 40}}, satisfaction_rating=8)
    data.update(overrides)
    return TaskSubmissionCreate(**data)


class TestRecurrenceDates:
    """generate_recurrence_dates is a pure function of the series settings."""

    def test_daily_series_respects_max_occurrences(self):
        start = datetime(2026, 3, 1, 9, 0)

        dates = generate_recurrence_dates(start, TaskFrequency.daily, {"interval": 2, "max_occurrences": 4})

        assert dates == [
            (2, datetime(2026, 3, 3, 9, 0)),
            (3, datetime(2026, 3, 5, 9, 0)),
            (4, datetime(2026, 3, 7, 9, 0)),
        ]

    def test_weekly_series_stops_after_end_date(self):
        start = datetime(2026, 3, 2, 18, 0)
        pattern = {"interval": 1, "end_date": datetime(2026, 3, 20)}

        dates = generate_recurrence_dates(start, TaskFrequency.weekly, pattern)

        assert [due for _, due in dates] == [datetime(2026, 3, 9, 18, 0), datetime(2026, 3, 16, 18, 0)]

    def test_exceptions_are_skipped_but_keep_sequence_numbers(self):
        start = datetime(2026, 3, 1)
        pattern = {"interval": 1, "max_occurrences": 4, "exceptions": [datetime(2026, 3, 3)]}

        dates = generate_recurrence_dates(start, TaskFrequency.daily, pattern)

        assert dates == [(2, datetime(2026, 3, 2)), (4, datetime(2026, 3, 4))]

    def test_monthly_series_clamps_to_month_end(self):
        start = datetime(2026, 1, 31)

        dates = generate_recurrence_dates(start, TaskFrequency.monthly, {"max_occurrences": 3})

        assert [due.date() for _, due in dates] == [date(2026, 2, 28), date(2026, 3, 31)]

    def test_series_is_capped(self):
        dates = generate_recurrence_dates(datetime(2026, 1, 1), TaskFrequency.daily, {}, max_total=5)
        assert len(dates) == 4

    def test_once_and_custom_have_no_siblings(self):
        assert generate_recurrence_dates(datetime(2026, 1, 1), TaskFrequency.once, {"interval": 1}) == []
        assert generate_recurrence_dates(datetime(2026, 1, 1), TaskFrequency.custom, {"interval": 1}) == []


class TestTaskResponseMapping:
    @staticmethod
    def make_task(now, **overrides):
        values = dict(
            id="t-1",
            title="Weigh in",
            task_type=TaskType.weight_check,
            coach_id="c-1",
            trainee_id="u-1",
            priority=TaskPriority.medium,
            status=TaskStatus.pending,
            frequency=TaskFrequency.once,
            points=20,
            is_visible=True,
            requires_approval=False,
            max_submissions=1,
            allow_late_submission=True,
            sequence_number=1,
            created_at=now - timedelta(days=3),
            updated_at=now - timedelta(days=3),
        )
        values.update(overrides)
        return Task(**values)

    def test_past_due_open_task_reads_as_overdue(self):
        # Arrange: A pending task that was due yesterday
        now = datetime(2026, 5, 10, 12, 0)
        task = self.make_task(now, due_date=now - timedelta(days=1))

        # Act
        response = task_to_response(task, submission_count=0, now=now)

        # Assert
        assert response.status == TaskStatus.overdue
        assert response.is_overdue is True
        assert response.days_until_due == -1

    def test_completed_task_is_never_overdue(self):
        now = datetime(2026, 5, 10, 12, 0)
        task = self.make_task(now, due_date=now - timedelta(days=1), status=TaskStatus.completed)

        response = task_to_response(task, submission_count=1, now=now)

        assert response.status == TaskStatus.completed
        assert response.is_overdue is False

    def test_days_until_due_rounds_up(self):
        now = datetime(2026, 5, 10, 12, 0)
        task = self.make_task(now, due_date=now + timedelta(hours=30))

        response = task_to_response(task, submission_count=2, now=now)

        assert response.days_until_due == 2
        assert response.submission_count == 2
        assert response.status == TaskStatus.pending


class TestTaskTypes:
    def test_lookup_tables_cover_every_type(self):
        assert set(DEFAULT_TASK_POINTS) == set(TaskType)
        assert set(TASK_TYPE_INFO) == set(TaskType)

    def test_list_task_types(self):
        types = {info.type: info for info in TaskService.list_task_types()}

        assert len(types) == len(TaskType)
        assert types[TaskType.workout].default_points == 50
        assert types[TaskType.workout].requires_config is True
        assert types[TaskType.custom].requires_config is False


class TestCreateTask:
    def test_create_task_uses_type_default_points(self, db_session, coach, trainee):
        response = create_workout_task(db_session, coach, trainee)

        assert response.points == 50
        assert response.status == TaskStatus.pending
        assert response.coach.name == "Casey Coach"
        assert response.task_config == {"workout": {"workout_id": "w-push"}}

    def test_explicit_zero_points_is_kept(self, db_session, coach, trainee):
        response = create_workout_task(db_session, coach, trainee, points=0)
        assert response.points == 0

    def test_unknown_trainee_is_404(self, db_session, coach):
        with pytest.raises(HTTPException) as exc_info:
            TaskService.create_task(
                db_session,
                coach.id,
                TaskCreate(title="x", task_type=TaskType.custom, trainee_id="missing"),
            )

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        assert exc_info.value.detail == "Trainee not found"

    def test_mismatched_config_is_400(self, db_session, coach, trainee):
        with pytest.raises(HTTPException) as exc_info:
            create_workout_task(db_session, coach, trainee, task_config={"meal_log": {"meals_to_log": ["lunch"]}})

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert db_session.query(Task).count() == 0

    def test_recurring_task_creates_siblings(self, db_session, coach, trainee):
        # Arrange
        due = datetime(2030, 1, 6, 8, 0)

        # Act
        parent = create_workout_task(
            db_session,
            coach,
            trainee,
            due_date=due,
            frequency=TaskFrequency.weekly,
            recurrence_pattern=RecurrencePattern(interval=1, max_occurrences=3),
        )

        # Assert
        siblings = (
            db_session.query(Task)
            .filter(Task.parent_task_id == parent.id)
            .order_by(Task.sequence_number)
            .all()
        )
        assert [sibling.sequence_number for sibling in siblings] == [2, 3]
        assert [sibling.due_date for sibling in siblings] == [due + timedelta(weeks=1), due + timedelta(weeks=2)]
        assert all(sibling.status == TaskStatus.pending for sibling in siblings)
        assert all(sibling.task_config == parent.task_config for sibling in siblings)


class TestSubmitTask:
    def test_submission_without_approval_completes_task(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        assert submission.status == SubmissionStatus.approved
        assert submission.points_awarded == 50
        assert submission.submission_number == 1
        stored = db_session.get(Task, task.id)
        assert stored.status == TaskStatus.completed
        assert stored.completed_at is not None
        assert stored.completion_data["completed_by"] == trainee.id

    def test_submission_requiring_approval_waits_for_review(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)

        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        assert submission.status == SubmissionStatus.submitted
        assert submission.points_awarded == 0
        assert db_session.get(Task, task.id).status == TaskStatus.in_progress

    def test_only_latest_submission_is_flagged(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True, max_submissions=3)

        first = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))
        second = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        db_session.expire_all()
        assert db_session.get(TaskSubmission, first.id).is_latest is False
        assert db_session.get(TaskSubmission, second.id).is_latest is True
        assert second.submission_number == 2

    def test_max_submissions_is_enforced(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        with pytest.raises(HTTPException) as exc_info:
            TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert "Maximum submissions (1)" in exc_info.value.detail

    def test_completed_task_rejects_submission(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, max_submissions=2)
        TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        with pytest.raises(HTTPException) as exc_info:
            TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST

    def test_late_submission_can_be_refused(self, db_session, coach, trainee):
        task = create_workout_task(
            db_session, coach, trainee, due_date=utcnow() - timedelta(hours=1), allow_late_submission=False
        )

        with pytest.raises(HTTPException) as exc_info:
            TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        assert exc_info.value.detail == "Late submissions are not allowed for this task"

    def test_wrong_payload_type_leaves_no_rows(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        with pytest.raises(HTTPException) as exc_info:
            TaskService.submit_task(
                db_session,
                trainee.id,
                workout_submission(task.id, submission_data={"weight_check": {"weight": 70}}),
            )

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert db_session.query(TaskSubmission).count() == 0
        assert db_session.get(Task, task.id).status == TaskStatus.pending

    def test_other_trainees_task_is_404(self, db_session, coach, trainee, make_user):
        task = create_workout_task(db_session, coach, trainee)
        stranger = make_user(UserRole.trainee)

        with pytest.raises(HTTPException) as exc_info:
            TaskService.submit_task(db_session, stranger.id, workout_submission(task.id))

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND

    def test_quick_submit_wraps_custom_payload(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        submission = TaskService.quick_submit_task(
            db_session, trainee.id, QuickSubmission(task_id=task.id, notes="Felt strong", rating=9)
        )

        assert submission.submission_data == {
            "custom": {"text": "Felt strong", "data": {"completed": True, "rating": 9}}
        }
        assert submission.satisfaction_rating == 9


class TestReviewSubmission:
    def test_approval_completes_task_and_awards_default_points(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        reviewed = TaskService.review_submission(
            db_session, submission.id, coach.id, SubmissionReview(status=SubmissionStatus.approved)
        )

        assert reviewed.status == SubmissionStatus.approved
        assert reviewed.points_awarded == 50
        assert reviewed.reviewed_by.id == coach.id
        assert db_session.get(Task, task.id).status == TaskStatus.completed

    def test_approval_stamps_completion_data(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        TaskService.review_submission(
            db_session, submission.id, coach.id, SubmissionReview(status=SubmissionStatus.approved)
        )

        completion = db_session.get(Task, task.id).completion_data
        assert completion["completed_by"] == coach.id
        assert completion["submission_id"] == submission.id
        assert completion["notes"] == "Submission approved"

    def test_rejection_keeps_task_open(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        TaskService.review_submission(
            db_session,
            submission.id,
            coach.id,
            SubmissionReview(status=SubmissionStatus.rejected, coach_feedback="Log the sets", points_awarded=0),
        )

        assert db_session.get(Task, task.id).status == TaskStatus.in_progress

    def test_second_review_is_rejected(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))
        review = SubmissionReview(status=SubmissionStatus.needs_revision)
        TaskService.review_submission(db_session, submission.id, coach.id, review)

        with pytest.raises(HTTPException) as exc_info:
            TaskService.review_submission(db_session, submission.id, coach.id, review)

        assert exc_info.value.detail == "Submission has already been reviewed"

    def test_other_coach_cannot_review(self, db_session, coach, other_coach, trainee):
        task = create_workout_task(db_session, coach, trainee, requires_approval=True)
        submission = TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        with pytest.raises(HTTPException) as exc_info:
            TaskService.review_submission(
                db_session, submission.id, other_coach.id, SubmissionReview(status=SubmissionStatus.approved)
            )

        assert exc_info.value.status_code == status.HTTP_403_FORBIDDEN

    def test_review_cannot_reset_to_submitted(self):
        with pytest.raises(ValueError):
            SubmissionReview(status=SubmissionStatus.submitted)


class TestUpdateAndDelete:
    def test_coach_completion_stamps_completion_data(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        response = TaskService.update_task(db_session, task.id, coach.id, TaskUpdate(status=TaskStatus.completed))

        assert response.status == TaskStatus.completed
        assert response.completion_data["notes"] == "Completed by coach"

    def test_completed_task_status_is_final(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)
        TaskService.update_task(db_session, task.id, coach.id, TaskUpdate(status=TaskStatus.cancelled))

        with pytest.raises(HTTPException) as exc_info:
            TaskService.update_task(db_session, task.id, coach.id, TaskUpdate(status=TaskStatus.pending))

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST

    def test_explicit_null_for_required_field_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            TaskUpdate.model_validate({"title": None, "points": None})

        assert {error["loc"][0] for error in exc_info.value.errors()} == {"title", "points"}

    def test_omitted_fields_are_left_unchanged(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        response = TaskService.update_task(
            db_session, task.id, coach.id, TaskUpdate.model_validate({"description": None})
        )

        assert response.title == "Push day"
        assert response.points == 50
        assert response.description is None

    def test_update_validates_config_against_existing_type(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        with pytest.raises(HTTPException):
            TaskService.update_task(
                db_session, task.id, coach.id, TaskUpdate(task_config={"custom": {"instructions": "x"}})
            )

    def test_task_with_submissions_cannot_be_deleted(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)
        TaskService.submit_task(db_session, trainee.id, workout_submission(task.id))

        with pytest.raises(HTTPException) as exc_info:
            TaskService.delete_task(db_session, task.id, coach.id)

        assert exc_info.value.detail == "Cannot delete a task that has submissions. Cancel the task instead."

    def test_delete_task(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        TaskService.delete_task(db_session, task.id, coach.id)

        assert db_session.query(Task).count() == 0


class TestBulkActions:
    def test_partial_success_is_reported_per_item(self, db_session, coach, other_coach, trainee):
        # Arrange: one owned task, one foreign task, one missing id
        own = create_workout_task(db_session, coach, trainee)
        foreign = create_workout_task(db_session, other_coach, trainee)

        # Act
        result = TaskService.bulk_task_action(
            db_session,
            coach.id,
            UserRole.coach,
            BulkTaskAction(task_ids=[own.id, foreign.id, "missing"], action="complete"),
        )

        # Assert
        assert result.succeeded == [own.id]
        assert result.success == 1
        assert result.failed == 2
        assert result.errors == [f"No permission for task {foreign.id}", "Task missing not found"]
        assert db_session.get(Task, own.id).status == TaskStatus.completed
        assert db_session.get(Task, foreign.id).status == TaskStatus.pending

    def test_terminal_task_cannot_be_completed_again(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)
        TaskService.update_task(db_session, task.id, coach.id, TaskUpdate(status=TaskStatus.cancelled))

        result = TaskService.bulk_task_action(
            db_session, coach.id, UserRole.coach, BulkTaskAction(task_ids=[task.id], action="complete")
        )

        assert result.success == 0
        assert result.errors == [f"Error with task {task.id}: task is already cancelled"]

    def test_change_priority(self, db_session, coach, trainee):
        task = create_workout_task(db_session, coach, trainee)

        TaskService.bulk_task_action(
            db_session,
            coach.id,
            UserRole.coach,
            BulkTaskAction(
                task_ids=[task.id],
                action="change_priority",
                action_data=BulkActionData(priority=TaskPriority.urgent),
            ),
        )

        assert db_session.get(Task, task.id).priority == TaskPriority.urgent

    def test_extend_due_date_requires_a_date(self):
        with pytest.raises(ValueError):
            BulkTaskAction(task_ids=["t-1"], action="extend_due_date")


class TestOverdueSweep:
    def test_only_open_past_due_tasks_are_marked(self, db_session, coach, trainee):
        late = create_workout_task(db_session, coach, trainee, due_date=utcnow() - timedelta(days=1))
        on_time = create_workout_task(db_session, coach, trainee, due_date=utcnow() + timedelta(days=1))
        done = create_workout_task(db_session, coach, trainee, due_date=utcnow() - timedelta(days=1))
        TaskService.update_task(db_session, done.id, coach.id, TaskUpdate(status=TaskStatus.completed))

        updated = TaskService.update_overdue_tasks(db_session)

        db_session.expire_all()
        assert updated == 1
        assert db_session.get(Task, late.id).status == TaskStatus.overdue
        assert db_session.get(Task, on_time.id).status == TaskStatus.pending
        assert db_session.get(Task, done.id).status == TaskStatus.completed


class TestListingAndSummary:
    def test_trainee_sees_only_visible_tasks(self, db_session, coach, trainee):
        create_workout_task(db_session, coach, trainee, title="Visible")
        create_workout_task(db_session, coach, trainee, title="Hidden", is_visible=False)

        result = TaskService.get_tasks(db_session, trainee.id, UserRole.trainee, TaskFilters())

        assert [task.title for task in result.tasks] == ["Visible"]
        assert result.total_count == 1

    def test_priority_sort_uses_rank_not_alphabet(self, db_session, coach, trainee):
        for priority in (TaskPriority.low, TaskPriority.urgent, TaskPriority.medium, TaskPriority.high):
            create_workout_task(db_session, coach, trainee, title=priority.value, priority=priority)

        result = TaskService.get_tasks(
            db_session, coach.id, UserRole.coach, TaskFilters(sort_by="priority", sort_order="desc")
        )

        assert [task.title for task in result.tasks] == ["urgent", "high", "medium", "low"]

    def test_tag_filter_matches_any_tag(self, db_session, coach, trainee):
        create_workout_task(db_session, coach, trainee, title="Legs", tags=["legs"])
        create_workout_task(db_session, coach, trainee, title="Arms", tags=["arms"])
        create_workout_task(db_session, coach, trainee, title="Core", tags=["core"])

        result = TaskService.get_tasks(
            db_session, coach.id, UserRole.coach, TaskFilters(tags=["legs", "core"], sort_by="title", sort_order="asc")
        )

        assert [task.title for task in result.tasks] == ["Core", "Legs"]

    def test_pagination_metadata(self, db_session, coach, trainee):
        for index in range(5):
            create_workout_task(db_session, coach, trainee, title=f"Task {index}")

        result = TaskService.get_tasks(db_session, coach.id, UserRole.coach, TaskFilters(page=2, page_size=2))

        assert len(result.tasks) == 2
        assert result.total_count == 5
        assert result.total_pages == 3
        assert result.has_next is True
        assert result.has_previous is True

    def test_list_summary_follows_filters(self, db_session, coach, trainee):
        create_workout_task(db_session, coach, trainee, title="Legs", priority=TaskPriority.high)
        create_workout_task(db_session, coach, trainee, title="Walk", priority=TaskPriority.low)
        create_workout_task(db_session, coach, trainee, title="Stretch", priority=TaskPriority.low)

        result = TaskService.get_tasks(
            db_session, coach.id, UserRole.coach, TaskFilters(priority=TaskPriority.low)
        )

        assert result.total_count == 2
        assert result.summary.pending == 2
        assert result.summary.total_points == 100

    def test_summary_counts_points_and_ratings(self, db_session, coach, trainee):
        done = create_workout_task(db_session, coach, trainee)
        create_workout_task(db_session, coach, trainee)
        TaskService.submit_task(db_session, trainee.id, workout_submission(done.id, satisfaction_rating=7))

        summary = TaskService.get_task_summary(db_session, trainee.id, UserRole.trainee)

        assert summary.total == 2
        assert summary.completed == 1
        assert summary.pending == 1
        assert summary.total_points == 100
        assert summary.points_earned == 50
        assert summary.completion_rate == 50
        assert summary.average_rating == 7
        assert summary.current_streak == 1

    def test_submissions_awaiting_review(self, db_session, coach, trainee):
        approval = create_workout_task(db_session, coach, trainee, requires_approval=True)
        auto = create_workout_task(db_session, coach, trainee)
        TaskService.submit_task(db_session, trainee.id, workout_submission(approval.id))
        TaskService.submit_task(db_session, trainee.id, workout_submission(auto.id))

        result = TaskService.get_task_submissions(
            db_session, coach.id, UserRole.coach, SubmissionFilters(review_required=True)
        )

        assert result.total_count == 1
        assert result.submissions[0].task_id == approval.id


class TestStreaks:
    def test_current_and_longest(self):
        today = date(2026, 6, 10)
        days = [date(2026, 6, 1), date(2026, 6, 2), date(2026, 6, 3), date(2026, 6, 9), date(2026, 6, 10)]

        assert TaskService.calculate_streaks(days, today) == (2, 3)

    def test_no_completion_today_means_no_current_streak(self):
        today = date(2026, 6, 10)
        assert TaskService.calculate_streaks([date(2026, 6, 8)], today) == (0, 1)

    def test_empty(self):
        assert TaskService.calculate_streaks([], date(2026, 6, 10)) == (0, 0)
