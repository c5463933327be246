"""
Unit tests for RecommendationService.

Profiles come from an injected provider, so scoring inputs are fixed per
test while recommendations are stored in the SQLite session.
"""

import pytest
from fastapi import HTTPException, status

from app.models.template import TemplateStatus
from app.models.template_recommendation import TemplateRecommendation
from app.schemas.template import TemplateCreate, TemplateUpdate
from app.services.recommendation import RecommendationService
from app.services.template import TemplateService
from app.services.trainee_profile import DatabaseTraineeProfileProvider, TraineeProfileData
from tests.factories import StaticProfileProvider, template_payload


def active_template(db, coach, **overrides):
    template = TemplateService.create_template(db, coach.id, TemplateCreate(**template_payload(**overrides)))
    TemplateService.update_template(db, template.id, coach.id, TemplateUpdate(status=TemplateStatus.active))
    return template


def good_profile(trainee_id, **overrides):
    values = dict(
        trainee_id=trainee_id,
        age=30,
        fitness_level="beginner",
        goals=["weight_loss"],
        equipment=["dumbbells"],
        minutes_per_day=45,
        days_per_week=4,
    )
    values.update(overrides)
    return TraineeProfileData(**values)


class TestGenerateRecommendations:
    def test_only_active_templates_above_threshold_are_stored(self, db_session, coach, trainee):
        # Arrange: one strong match, one weak match and one draft
        strong = active_template(db_session, coach, name="Strong")
        active_template(
            db_session,
            coach,
            name="Weak",
            equipment_required=["rower", "sled"],
            target_criteria={"age_range": {"min": 55, "max": 65}, "goals": ["bulking"]},
        )
        TemplateService.create_template(db_session, coach.id, TemplateCreate(**template_payload(name="Draft")))
        service = RecommendationService(StaticProfileProvider(good_profile(trainee.id)))

        # Act
        created = service.generate_recommendations_for_trainee(db_session, coach.id, trainee.id)

        # Assert
        assert [row.template_id for row in created] == [strong.id]
        stored = db_session.query(TemplateRecommendation).one()
        assert float(stored.score) == 100
        assert stored.is_auto_generated is True
        assert stored.expires_at is not None
        assert stored.reason.startswith("Excellent match!")

    def test_regeneration_replaces_previous_rows(self, db_session, coach, trainee):
        active_template(db_session, coach)
        service = RecommendationService(StaticProfileProvider(good_profile(trainee.id)))

        service.generate_recommendations_for_trainee(db_session, coach.id, trainee.id)
        service.generate_recommendations_for_trainee(db_session, coach.id, trainee.id)

        assert db_session.query(TemplateRecommendation).count() == 1

    def test_profile_comes_from_injected_provider(self, db_session, coach, trainee):
        active_template(db_session, coach)
        provider = StaticProfileProvider(good_profile(trainee.id))

        RecommendationService(provider).get_template_recommendations(db_session, coach.id, trainee.id)

        assert provider.calls == [trainee.id]

    def test_unknown_trainee_is_404(self, db_session, coach):
        service = RecommendationService(StaticProfileProvider())

        with pytest.raises(HTTPException) as exc_info:
            service.get_template_recommendations(db_session, coach.id, "nobody")

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        assert exc_info.value.detail == "Trainee not found"

    def test_results_are_ordered_and_limited(self, db_session, coach, trainee):
        active_template(db_session, coach, name="Perfect")
        active_template(db_session, coach, name="Missing bench", equipment_required=["dumbbells", "bench"])
        service = RecommendationService(StaticProfileProvider(good_profile(trainee.id)))

        result = service.get_template_recommendations(db_session, coach.id, trainee.id, limit=1)

        assert result.total == 1
        assert result.recommendations[0].template.name == "Perfect"


class TestRecommendationActions:
    @pytest.fixture
    def recommendation(self, db_session, coach, trainee):
        active_template(db_session, coach)
        service = RecommendationService(StaticProfileProvider(good_profile(trainee.id)))
        return service.get_template_recommendations(db_session, coach.id, trainee.id).recommendations[0]

    def test_accept_also_marks_viewed(self, db_session, coach, recommendation):
        service = RecommendationService(StaticProfileProvider())

        accepted = service.accept(db_session, recommendation.id, coach.id)

        assert accepted.accepted is True
        assert accepted.viewed is True
        assert accepted.accepted_at == accepted.viewed_at

    def test_dismissed_recommendation_cannot_be_accepted(self, db_session, coach, recommendation):
        service = RecommendationService(StaticProfileProvider())
        dismissed = service.dismiss(db_session, recommendation.id, coach.id, feedback="Too advanced")

        with pytest.raises(HTTPException) as exc_info:
            service.accept(db_session, recommendation.id, coach.id)

        assert dismissed.coach_feedback == "Too advanced"
        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_coach_gets_404(self, db_session, other_coach, recommendation):
        with pytest.raises(HTTPException) as exc_info:
            RecommendationService(StaticProfileProvider()).mark_viewed(db_session, recommendation.id, other_coach.id)

        assert exc_info.value.detail == "Recommendation not found"


class TestDatabaseProfileProvider:
    def test_missing_profile_gives_empty_snapshot(self, db_session, trainee):
        profile = DatabaseTraineeProfileProvider().get_profile(db_session, trainee.id)

        assert profile == TraineeProfileData(trainee_id=trainee.id)
        assert profile.has_time_availability is False

    def test_stored_profile_is_read(self, db_session, trainee, trainee_profile):
        profile = DatabaseTraineeProfileProvider().get_profile(db_session, trainee.id)

        assert profile.age == 30
        assert profile.goals == ["weight_loss"]
        assert profile.equipment == ["dumbbells", "mat"]
        assert profile.has_time_availability is True
