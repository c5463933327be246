"""
Unit tests for the template matching scorer.

The scorer is a pure function of a template and a trainee profile, so these
tests use lightweight stand-ins instead of ORM rows.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.recommendation import is_recommended
from app.services.template_matching import (
    CRITERIA_WEIGHTS,
    build_reason,
    round_half_up,
    score_age,
    score_equipment,
    score_fitness_level,
    score_goals,
    score_template,
    score_time,
)
from app.services.trainee_profile import TraineeProfileData


def make_template(**overrides):
    template = SimpleNamespace(
        target_criteria={
            "age_range": {"min": 20, "max": 40},
            "fitness_level": ["beginner"],
            "goals": ["weight_loss"],
            "time_availability": {"min_minutes_per_day": 30, "days_per_week": 3},
        },
        equipment_required=["dumbbells"],
        usage_count=0,
        success_rate=Decimal("0"),
    )
    for key, value in overrides.items():
        setattr(template, key, value)
    return template


def make_profile(**overrides):
    values = dict(
        trainee_id="t-1",
        age=30,
        fitness_level="beginner",
        goals=["weight_loss"],
        equipment=["dumbbells"],
        minutes_per_day=45,
        days_per_week=4,
    )
    values.update(overrides)
    return TraineeProfileData(**values)


class TestRounding:
    @pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (62.49, 62), (99.5, 100)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestCriterionScores:
    def test_age_inside_range(self):
        assert score_age({"min": 20, "max": 40}, 40)["score"] == 100

    def test_age_outside_range_loses_five_points_per_year_from_midpoint(self):
        # Midpoint 30, age 42 -> 100 - 12 * 5
        result = score_age({"min": 20, "max": 40}, 42)
        assert result["matched"] is False
        assert result["score"] == 40

    def test_age_far_outside_range_floors_at_zero(self):
        assert score_age({"min": 20, "max": 30}, 70)["score"] == 0

    def test_unknown_age_scores_zero(self):
        assert score_age({"min": 20, "max": 40}, None)["score"] == 0

    def test_goals_score_is_share_of_trainee_goals(self):
        result = score_goals(["weight_loss", "endurance"], ["weight_loss", "muscle_gain"])
        assert result["overlap"] == ["weight_loss"]
        assert result["score"] == 50

    def test_no_goal_overlap_scores_zero(self):
        assert score_goals(["bulking"], ["cutting"])["score"] == 0

    def test_fitness_level_one_step_away(self):
        result = score_fitness_level(["beginner"], "intermediate")
        assert result["matched"] is False
        assert result["score"] == 70

    def test_fitness_level_two_steps_away(self):
        assert score_fitness_level(["advanced"], "beginner")["score"] == 40

    def test_unknown_fitness_level_counts_as_intermediate(self):
        assert score_fitness_level(["advanced"], None)["score"] == 70

    def test_equipment_partial(self):
        result = score_equipment(["dumbbells", "bench", "barbell"], ["dumbbells"])
        assert result["missing_equipment"] == ["bench", "barbell"]
        assert result["score"] == 33

    def test_no_required_equipment_is_full_score(self):
        assert score_equipment([], [])["score"] == 100

    def test_time_shortfall_scores_fifty(self):
        profile = make_profile(minutes_per_day=20)
        result = score_time({"min_minutes_per_day": 30, "days_per_week": 3}, profile)
        assert result["matched"] is False
        assert result["score"] == 50

    def test_time_unknown_on_trainee_side_is_full_score(self):
        profile = make_profile(minutes_per_day=None)
        assert score_time({"min_minutes_per_day": 30, "days_per_week": 3}, profile)["score"] == 100


class TestScoreTemplate:
    def test_weights_sum_to_one_hundred(self):
        assert sum(CRITERIA_WEIGHTS.values()) == 100

    def test_perfect_match(self):
        # Arrange
        template = make_template()
        profile = make_profile()

        # Act
        result = score_template(template, profile)

        # Assert
        assert result.overall_score == 100
        assert result.confidence == 95
        assert result.success_probability == 50
        assert result.reason.startswith("Excellent match!")
        assert "Aligns with your weight_loss goals" in result.reason
        assert result.details["overall_match_score"] == 100
        assert set(result.details["criteria_matches"]) == set(CRITERIA_WEIGHTS)

    def test_score_of_exactly_sixty_is_not_recommended(self):
        # Age 25 points off the midpoint (0), goals 100, fitness 100,
        # equipment missing (0), time 100 -> 30 + 20 + 10 = 60
        template = make_template(
            target_criteria={
                "age_range": {"min": 50, "max": 60},
                "fitness_level": ["beginner"],
                "goals": ["weight_loss"],
            },
            equipment_required=["rower"],
        )
        profile = make_profile(age=30, equipment=[])

        result = score_template(template, profile)

        assert result.overall_score == 60
        assert is_recommended(result.overall_score) is False
        assert is_recommended(61) is True

    def test_confidence_grows_with_usage_and_caps(self):
        template = make_template(usage_count=10, success_rate=Decimal("80"))
        profile = make_profile(goals=["weight_loss", "endurance"])

        result = score_template(template, profile)

        # goals 50 -> 15 points lost
        assert result.overall_score == 85
        assert result.confidence == 95
        assert result.success_probability == 90

    def test_missing_criteria_fields_do_not_penalise(self):
        template = make_template(target_criteria={"goals": ["weight_loss"]}, equipment_required=[])
        assert score_template(template, make_profile(age=None)).overall_score == 100


class TestBuildReason:
    def test_tier_only_when_nothing_matched(self):
        criteria = {
            "goals": {"matched": False},
            "fitness_level": {"matched": False, "trainee_value": "beginner"},
            "equipment_availability": {"matched": False},
            "age": {"matched": False},
        }
        assert build_reason(criteria, 62) == "Good option."

    def test_fitness_clause_needs_a_trainee_level(self):
        criteria = {"fitness_level": {"matched": True, "trainee_value": None}, "age": {"matched": True}}
        assert build_reason(criteria, 80) == "Great fit! Age-appropriate program."
