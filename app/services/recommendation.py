"""Template recommendation store.

Recommendations are regenerated from scratch whenever a coach asks for them:
earlier rows for the coach/trainee pair are removed and every active template
scoring above the threshold is stored again.
"""

from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.template import Template, TemplateStatus
from app.models.template_recommendation import TemplateRecommendation
from app.models.user import User, UserRole
from app.schemas.template_assignment import (
    RecommendedTemplate,
    TemplateRecommendationListResponse,
    TemplateRecommendationResponse,
)
from app.services.base import TransactionManager, get_or_404
from app.services.template_matching import score_template
from app.services.trainee_profile import TraineeProfileProvider
from app.utils.logger import recommendation_logger
from app.utils.time import utcnow


def is_recommended(score: int) -> bool:
    return score > settings.RECOMMENDATION_MIN_SCORE


def recommendation_to_response(recommendation: TemplateRecommendation) -> TemplateRecommendationResponse:
    data = {
        column.name: getattr(recommendation, column.name)
        for column in TemplateRecommendation.__table__.columns
    }
    template = recommendation.template
    data["template"] = RecommendedTemplate.model_validate(template) if template else None
    return TemplateRecommendationResponse.model_validate(data)


class RecommendationService:
    def __init__(self, profile_provider: TraineeProfileProvider):
        self.profile_provider = profile_provider

    def generate_recommendations_for_trainee(
        self, db: Session, coach_id: str, trainee_id: str
    ) -> List[TemplateRecommendation]:
        """Replace the pair's recommendations with a freshly scored set."""
        profile = self.profile_provider.get_profile(db, trainee_id)
        templates = (
            db.query(Template)
            .filter(Template.coach_id == coach_id, Template.status == TemplateStatus.active)
            .all()
        )

        now = utcnow()
        expires_at = now + timedelta(days=settings.RECOMMENDATION_TTL_DAYS)
        created = []

        with TransactionManager(db):
            db.query(TemplateRecommendation).filter(
                TemplateRecommendation.coach_id == coach_id,
                TemplateRecommendation.trainee_id == trainee_id,
            ).delete(synchronize_session=False)

            for template in templates:
                match = score_template(template, profile)
                if not is_recommended(match.overall_score):
                    continue
                recommendation = TemplateRecommendation(
                    template_id=template.id,
                    trainee_id=trainee_id,
                    coach_id=coach_id,
                    score=Decimal(match.overall_score),
                    confidence=Decimal(match.confidence),
                    reason=match.reason,
                    matching_details=match.details,
                    is_auto_generated=True,
                    expires_at=expires_at,
                )
                db.add(recommendation)
                created.append(recommendation)

        recommendation_logger.info(
            "Generated recommendations",
            "generate",
            coach_id=coach_id,
            trainee_id=trainee_id,
            scored=len(templates),
            recommended=len(created),
        )
        return created

    def get_template_recommendations(
        self, db: Session, coach_id: str, trainee_id: str, limit: int = settings.RECOMMENDATION_DEFAULT_LIMIT
    ) -> TemplateRecommendationListResponse:
        trainee = db.query(User).filter(User.id == trainee_id, User.role == UserRole.trainee).first()
        if not trainee:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trainee not found")

        self.generate_recommendations_for_trainee(db, coach_id, trainee_id)

        recommendations = (
            db.query(TemplateRecommendation)
            .filter(
                TemplateRecommendation.coach_id == coach_id,
                TemplateRecommendation.trainee_id == trainee_id,
                TemplateRecommendation.dismissed.is_(False),
            )
            .order_by(TemplateRecommendation.score.desc(), TemplateRecommendation.id)
            .limit(limit)
            .all()
        )
        return TemplateRecommendationListResponse(
            trainee_id=trainee_id,
            total=len(recommendations),
            recommendations=[recommendation_to_response(item) for item in recommendations],
        )

    @staticmethod
    def _get_owned(db: Session, recommendation_id: str, coach_id: str) -> TemplateRecommendation:
        return get_or_404(
            db, TemplateRecommendation, recommendation_id, "Recommendation not found", coach_id=coach_id
        )

    def mark_viewed(self, db: Session, recommendation_id: str, coach_id: str) -> TemplateRecommendationResponse:
        recommendation = self._get_owned(db, recommendation_id, coach_id)
        with TransactionManager(db):
            if not recommendation.viewed:
                recommendation.viewed = True
                recommendation.viewed_at = utcnow()
        db.refresh(recommendation)
        return recommendation_to_response(recommendation)

    def accept(self, db: Session, recommendation_id: str, coach_id: str) -> TemplateRecommendationResponse:
        recommendation = self._get_owned(db, recommendation_id, coach_id)
        if recommendation.dismissed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot accept a dismissed recommendation",
            )
        now = utcnow()
        with TransactionManager(db):
            recommendation.accepted = True
            recommendation.accepted_at = now
            if not recommendation.viewed:
                recommendation.viewed = True
                recommendation.viewed_at = now
        db.refresh(recommendation)
        recommendation_logger.success("Recommendation accepted", "accept", recommendation_id=recommendation.id)
        return recommendation_to_response(recommendation)

    def dismiss(
        self, db: Session, recommendation_id: str, coach_id: str, feedback: Optional[str] = None
    ) -> TemplateRecommendationResponse:
        recommendation = self._get_owned(db, recommendation_id, coach_id)
        with TransactionManager(db):
            recommendation.dismissed = True
            recommendation.dismissed_at = utcnow()
            if feedback is not None:
                recommendation.coach_feedback = feedback
        db.refresh(recommendation)
        recommendation_logger.info("Recommendation dismissed", "dismiss", recommendation_id=recommendation.id)
        return recommendation_to_response(recommendation)
