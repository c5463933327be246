from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_coach, get_db
from app.core.config import settings
from app.models.template import DifficultyLevel, TemplateStatus, TemplateType
from app.models.template_assignment import AssignmentStatus
from app.models.user import User
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
)
from app.services.template import TemplateService

router = APIRouter()


@router.post("/", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    template_data: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Create a draft template owned by the calling coach."""
    return TemplateService.create_template(db, current_user.id, template_data)


@router.get("/", response_model=TemplateListResponse)
def get_templates(
    template_type: Optional[TemplateType] = Query(None),
    template_status: Optional[TemplateStatus] = Query(None, alias="status"),
    difficulty: Optional[DifficultyLevel] = Query(None),
    include_public: bool = Query(False, description="Also list other coaches' public templates"),
    tags: Optional[List[str]] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
    sort_by: Literal["name", "created_at", "usage_count", "average_rating", "success_rate"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    filters = TemplateFilters(
        template_type=template_type,
        status=template_status,
        difficulty=difficulty,
        include_public=include_public,
        tags=tags,
        min_rating=min_rating,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return TemplateService.get_templates(db, current_user.id, filters)


@router.post("/assign", response_model=TemplateAssignmentResponse, status_code=status.HTTP_201_CREATED)
def assign_template(
    assign_data: TemplateAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Assign an active template to a trainee."""
    return TemplateService.assign_template(db, current_user.id, assign_data)


@router.get("/assignments", response_model=TemplateAssignmentListResponse)
def get_template_assignments(
    template_id: Optional[str] = Query(None),
    trainee_id: Optional[str] = Query(None),
    assignment_status: Optional[AssignmentStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    filters = AssignmentFilters(
        template_id=template_id,
        trainee_id=trainee_id,
        status=assignment_status,
        page=page,
        page_size=page_size,
    )
    return TemplateService.get_template_assignments(db, current_user.id, filters)


@router.patch("/assignments/{assignment_id}", response_model=TemplateAssignmentResponse)
def update_assignment(
    assignment_id: str,
    update: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    return TemplateService.update_assignment(db, assignment_id, current_user.id, update)


@router.patch("/assignments/{assignment_id}/progress", response_model=TemplateAssignmentResponse)
def update_assignment_progress(
    assignment_id: str,
    progress_update: AssignmentProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Record weekly progress; reaching the final week completes an active assignment."""
    return TemplateService.update_assignment_progress(db, assignment_id, current_user.id, progress_update)


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    return TemplateService.get_template_by_id(db, template_id, current_user.id)


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: str,
    template_data: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    return TemplateService.update_template(db, template_id, current_user.id, template_data)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
):
    """Delete a template that has no active assignments."""
    TemplateService.delete_template(db, template_id, current_user.id)
