"""
Template catalogue and assignment service.

Coaches build multi-week templates, assign them to trainees and record the
trainee's progress through the assignment.
"""

from datetime import timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional

from fastapi import HTTPException, status
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from app.models.template import Template, TemplateStatus
from app.models.template_assignment import AssignmentStatus, TemplateAssignment
from app.models.user import User, UserRole
from app.schemas.base import PaginationMeta
from app.schemas.template import (
    TemplateCreate,
    TemplateFilters,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)
from app.schemas.template_assignment import (
    AssignmentFilters,
    AssignmentProgressUpdate,
    AssignmentUpdate,
    TemplateAssign,
    TemplateAssignmentListResponse,
    TemplateAssignmentResponse,
    TemplateReference,
)
from app.services.base import TransactionManager, get_or_404, paginate
from app.services.task import user_summary
from app.services.template_matching import round_half_up
from app.utils.logger import template_logger
from app.utils.time import utcnow

COST_PER_MEAL = 15
WORKOUTS_PER_WEEK = 5
MEALS_PER_WEEK = 21

ASSIGNMENT_TRANSITIONS: Mapping[AssignmentStatus, FrozenSet[AssignmentStatus]] = MappingProxyType({
    AssignmentStatus.scheduled: frozenset({AssignmentStatus.active, AssignmentStatus.cancelled}),
    AssignmentStatus.active: frozenset(
        {AssignmentStatus.paused, AssignmentStatus.completed, AssignmentStatus.cancelled}
    ),
    AssignmentStatus.paused: frozenset({AssignmentStatus.active}),
    AssignmentStatus.completed: frozenset(),
    AssignmentStatus.cancelled: frozenset(),
})

# JSON blobs on Template that are stored from nested pydantic models
_TEMPLATE_JSON_FIELDS = (
    "schedule",
    "target_criteria",
    "nutrition_targets",
    "fitness_targets",
    "prerequisites",
)


def estimate_weekly_cost(schedule: Mapping[str, Mapping[str, Any]]) -> int:
    """Flat per-meal estimate averaged over the weeks in ``schedule``."""
    if not schedule:
        return 0
    total_meals = sum(
        len(day.get("meals") or [])
        for week in schedule.values()
        for day in week.values()
    )
    return round_half_up(total_meals * COST_PER_MEAL / len(schedule))


def template_to_response(template: Template) -> TemplateResponse:
    data = {column.name: getattr(template, column.name) for column in Template.__table__.columns}
    data["coach"] = user_summary(template.coach)
    return TemplateResponse.model_validate(data)


def assignment_to_response(assignment: TemplateAssignment) -> TemplateAssignmentResponse:
    data = {column.name: getattr(assignment, column.name) for column in TemplateAssignment.__table__.columns}
    template = assignment.template
    data.update(
        template=TemplateReference.model_validate(template) if template else None,
        trainee=user_summary(assignment.trainee),
        coach=user_summary(assignment.coach),
    )
    return TemplateAssignmentResponse.model_validate(data)


def default_progress() -> Dict[str, Any]:
    return {
        "current_week": 1,
        "current_day": 1,
        "completed_workouts": 0,
        "missed_workouts": 0,
        "completed_meals": 0,
        "missed_meals": 0,
        "adherence_percentage": 0,
        "weekly_progress": [],
        "last_updated": utcnow().isoformat(),
    }


def merge_progress(current: Optional[Dict[str, Any]], update: AssignmentProgressUpdate) -> Dict[str, Any]:
    """
    Merge a progress update into the stored snapshot.

    Counters keep their stored value when omitted. Qualitative fields upsert
    one ``weekly_progress`` entry per week number; adherence for that entry
    assumes five workouts and twenty-one meals per week.
    """
    progress = {**default_progress(), **(current or {})}
    progress["weekly_progress"] = [dict(entry) for entry in progress.get("weekly_progress") or []]

    progress["current_week"] = update.current_week
    progress["current_day"] = update.current_day
    for field in (
        "completed_workouts",
        "missed_workouts",
        "completed_meals",
        "missed_meals",
        "adherence_percentage",
        "overall_rating",
        "feedback",
    ):
        value = getattr(update, field)
        if value is not None:
            progress[field] = value
    progress["last_updated"] = utcnow().isoformat()

    if (
        update.weight_change is not None
        or update.energy_level is not None
        or update.satisfaction is not None
        or update.notes
    ):
        week = update.current_week
        entry = {
            "week": week,
            "workout_adherence": round_half_up(progress["completed_workouts"] / (week * WORKOUTS_PER_WEEK) * 100),
            "nutrition_adherence": round_half_up(progress["completed_meals"] / (week * MEALS_PER_WEEK) * 100),
            "weight_change": update.weight_change,
            "energy_level": update.energy_level,
            "satisfaction": update.satisfaction,
            "notes": update.notes,
        }
        weekly = progress["weekly_progress"]
        for index, existing in enumerate(weekly):
            if existing.get("week") == week:
                weekly[index] = entry
                break
        else:
            weekly.append(entry)

    return progress


class TemplateService:
    @staticmethod
    def _get_owned_template(db: Session, template_id: str, coach_id: str) -> Template:
        return get_or_404(db, Template, template_id, "Template not found", coach_id=coach_id)

    @staticmethod
    def _get_owned_assignment(db: Session, assignment_id: str, coach_id: str) -> TemplateAssignment:
        return get_or_404(db, TemplateAssignment, assignment_id, "Assignment not found", coach_id=coach_id)

    # ------------------------------------------------------------------
    # templates
    # ------------------------------------------------------------------

    @staticmethod
    def create_template(db: Session, coach_id: str, template_data: TemplateCreate) -> TemplateResponse:
        coach = db.query(User).filter(User.id == coach_id, User.role == UserRole.coach).first()
        if not coach:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coach not found")

        data = template_data.model_dump(mode="json")
        template = Template(
            name=template_data.name,
            description=template_data.description,
            template_type=template_data.template_type,
            coach_id=coach_id,
            status=TemplateStatus.draft,
            duration_weeks=template_data.duration_weeks,
            difficulty=template_data.difficulty,
            equipment_required=list(template_data.equipment_required),
            tags=list(template_data.tags),
            is_public=template_data.is_public,
            estimated_weekly_cost=Decimal(estimate_weekly_cost(data["schedule"])),
            **{field: data[field] for field in _TEMPLATE_JSON_FIELDS},
        )

        with TransactionManager(db):
            db.add(template)

        db.refresh(template)
        template_logger.success("Created template", "create", template_id=template.id, coach_id=coach_id)
        return template_to_response(template)

    @staticmethod
    def get_templates(db: Session, coach_id: str, filters: TemplateFilters) -> TemplateListResponse:
        query = db.query(Template)
        if filters.include_public:
            query = query.filter(or_(Template.coach_id == coach_id, Template.is_public.is_(True)))
        else:
            query = query.filter(Template.coach_id == coach_id)

        if filters.template_type:
            query = query.filter(Template.template_type == filters.template_type)
        if filters.status:
            query = query.filter(Template.status == filters.status)
        if filters.difficulty:
            query = query.filter(Template.difficulty == filters.difficulty)
        if filters.tags:
            tags_text = cast(Template.tags, String)
            query = query.filter(or_(*[tags_text.like(f'%"{tag}"%') for tag in filters.tags]))
        if filters.min_rating is not None:
            query = query.filter(Template.average_rating >= filters.min_rating)

        column = getattr(Template, filters.sort_by)
        query = query.order_by(column.asc() if filters.sort_order == "asc" else column.desc(), Template.id)

        templates, total_count = paginate(query, filters.page, filters.page_size)
        meta = PaginationMeta.build(total_count, filters.page, filters.page_size)
        return TemplateListResponse(
            **meta.model_dump(),
            templates=[template_to_response(template) for template in templates],
        )

    @classmethod
    def get_template_by_id(cls, db: Session, template_id: str, coach_id: str) -> TemplateResponse:
        return template_to_response(cls._get_owned_template(db, template_id, coach_id))

    @classmethod
    def update_template(
        cls, db: Session, template_id: str, coach_id: str, template_data: TemplateUpdate
    ) -> TemplateResponse:
        template = cls._get_owned_template(db, template_id, coach_id)

        update_data = template_data.model_dump(exclude_unset=True)
        json_data = template_data.model_dump(mode="json", exclude_unset=True)
        for field in _TEMPLATE_JSON_FIELDS:
            if field in json_data:
                update_data[field] = json_data[field]

        new_status = update_data.get("status")
        if new_status == TemplateStatus.archived:
            active_assignments = (
                db.query(TemplateAssignment)
                .filter(
                    TemplateAssignment.template_id == template_id,
                    TemplateAssignment.status == AssignmentStatus.active,
                )
                .count()
            )
            if active_assignments > 0:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot archive a template that has active assignments",
                )

        with TransactionManager(db):
            for field, value in update_data.items():
                setattr(template, field, value)
            if update_data.get("schedule"):
                template.estimated_weekly_cost = Decimal(estimate_weekly_cost(update_data["schedule"]))
            if new_status == TemplateStatus.published and template.published_at is None:
                template.published_at = utcnow()

        db.refresh(template)
        template_logger.info("Updated template", "update", template_id=template.id, fields=sorted(update_data))
        return template_to_response(template)

    @classmethod
    def delete_template(cls, db: Session, template_id: str, coach_id: str) -> None:
        template = cls._get_owned_template(db, template_id, coach_id)

        assignment_count = (
            db.query(TemplateAssignment).filter(TemplateAssignment.template_id == template_id).count()
        )
        if assignment_count > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a template that has been assigned to trainees",
            )

        with TransactionManager(db):
            db.delete(template)
        template_logger.info("Deleted template", "delete", template_id=template_id)

    # ------------------------------------------------------------------
    # assignments
    # ------------------------------------------------------------------

    @classmethod
    def assign_template(cls, db: Session, coach_id: str, assign_data: TemplateAssign) -> TemplateAssignmentResponse:
        """Assign a template; the new row and the usage counter are committed together."""
        template = cls._get_owned_template(db, assign_data.template_id, coach_id)

        trainee = (
            db.query(User)
            .filter(User.id == assign_data.trainee_id, User.role == UserRole.trainee)
            .first()
        )
        if not trainee:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trainee not found")

        existing = (
            db.query(TemplateAssignment)
            .filter(
                TemplateAssignment.template_id == template.id,
                TemplateAssignment.trainee_id == trainee.id,
                TemplateAssignment.status == AssignmentStatus.active,
            )
            .first()
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Trainee already has an active assignment for this template",
            )

        assignment = TemplateAssignment(
            template_id=template.id,
            trainee_id=trainee.id,
            coach_id=coach_id,
            status=AssignmentStatus.scheduled,
            start_date=assign_data.start_date,
            end_date=assign_data.start_date + timedelta(days=template.duration_weeks * 7),
            instructions=assign_data.instructions,
            priority=assign_data.priority,
            customizations=(
                assign_data.customizations.model_dump(mode="json", exclude_none=True)
                if assign_data.customizations
                else None
            ),
        )

        with TransactionManager(db):
            db.add(assignment)
            template.usage_count = (template.usage_count or 0) + 1

        db.refresh(assignment)
        template_logger.success(
            "Assigned template",
            "assign",
            template_id=template.id,
            trainee_id=trainee.id,
            assignment_id=assignment.id,
        )
        return assignment_to_response(assignment)

    @staticmethod
    def get_template_assignments(
        db: Session, coach_id: str, filters: AssignmentFilters
    ) -> TemplateAssignmentListResponse:
        query = db.query(TemplateAssignment).filter(TemplateAssignment.coach_id == coach_id)
        if filters.template_id:
            query = query.filter(TemplateAssignment.template_id == filters.template_id)
        if filters.trainee_id:
            query = query.filter(TemplateAssignment.trainee_id == filters.trainee_id)
        if filters.status:
            query = query.filter(TemplateAssignment.status == filters.status)

        query = query.order_by(TemplateAssignment.created_at.desc(), TemplateAssignment.id)
        assignments, total_count = paginate(query, filters.page, filters.page_size)
        meta = PaginationMeta.build(total_count, filters.page, filters.page_size)
        return TemplateAssignmentListResponse(
            **meta.model_dump(),
            assignments=[assignment_to_response(assignment) for assignment in assignments],
        )

    @classmethod
    def update_assignment(
        cls, db: Session, assignment_id: str, coach_id: str, update: AssignmentUpdate
    ) -> TemplateAssignmentResponse:
        assignment = cls._get_owned_assignment(db, assignment_id, coach_id)
        update_data = update.model_dump(exclude_unset=True, exclude={"status", "customizations"})
        new_status = update.status

        if new_status is not None and new_status != assignment.status:
            if new_status not in ASSIGNMENT_TRANSITIONS[assignment.status]:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot move assignment from {assignment.status.value} to {new_status.value}",
                )

        with TransactionManager(db):
            for field, value in update_data.items():
                setattr(assignment, field, value)
            if "customizations" in update.model_fields_set:
                assignment.customizations = (
                    update.customizations.model_dump(mode="json", exclude_none=True)
                    if update.customizations
                    else None
                )
            if new_status is not None and new_status != assignment.status:
                assignment.status = new_status
                if new_status == AssignmentStatus.active and assignment.actual_start_date is None:
                    assignment.actual_start_date = utcnow()
                if new_status == AssignmentStatus.completed:
                    assignment.completed_at = utcnow()

        db.refresh(assignment)
        template_logger.info(
            "Updated assignment", "assignment", assignment_id=assignment.id, status=assignment.status.value
        )
        return assignment_to_response(assignment)

    @classmethod
    def update_assignment_progress(
        cls, db: Session, assignment_id: str, coach_id: str, progress_update: AssignmentProgressUpdate
    ) -> TemplateAssignmentResponse:
        assignment = cls._get_owned_assignment(db, assignment_id, coach_id)

        with TransactionManager(db):
            assignment.progress = merge_progress(assignment.progress, progress_update)
            if (
                progress_update.current_week >= assignment.template.duration_weeks
                and assignment.status == AssignmentStatus.active
            ):
                assignment.status = AssignmentStatus.completed
                assignment.completed_at = utcnow()

        db.refresh(assignment)
        template_logger.info(
            "Recorded assignment progress",
            "progress",
            assignment_id=assignment.id,
            week=progress_update.current_week,
            status=assignment.status.value,
        )
        return assignment_to_response(assignment)
