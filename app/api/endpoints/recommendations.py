from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_coach, get_db, get_recommendation_service
from app.core.config import settings
from app.models.user import User
from app.schemas.template_assignment import (
    RecommendationDismiss,
    TemplateRecommendationListResponse,
    TemplateRecommendationResponse,
)
from app.services.recommendation import RecommendationService

router = APIRouter()


@router.get("/trainees/{trainee_id}", response_model=TemplateRecommendationListResponse)
def get_template_recommendations(
    trainee_id: str,
    limit: int = Query(settings.RECOMMENDATION_DEFAULT_LIMIT, ge=1, le=50, description="Maximum recommendations"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """
    Score the coach's active templates against a trainee and return the best matches.

    Previous recommendations for the pair are replaced on every call.
    """
    return service.get_template_recommendations(db, current_user.id, trainee_id, limit)


@router.post("/{recommendation_id}/view", response_model=TemplateRecommendationResponse)
def mark_recommendation_viewed(
    recommendation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
    service: RecommendationService = Depends(get_recommendation_service),
):
    return service.mark_viewed(db, recommendation_id, current_user.id)


@router.post("/{recommendation_id}/accept", response_model=TemplateRecommendationResponse)
def accept_recommendation(
    recommendation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
    service: RecommendationService = Depends(get_recommendation_service),
):
    return service.accept(db, recommendation_id, current_user.id)


@router.post("/{recommendation_id}/dismiss", response_model=TemplateRecommendationResponse)
def dismiss_recommendation(
    recommendation_id: str,
    body: Optional[RecommendationDismiss] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_coach),
    service: RecommendationService = Depends(get_recommendation_service),
):
    feedback = body.feedback if body else None
    return service.dismiss(db, recommendation_id, current_user.id, feedback)
