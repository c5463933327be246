"""
Template matching scorer.

Scores how well a template fits a trainee across five weighted criteria and
builds the human readable reason shown to coaches. Everything here is a pure
function of a template and a :class:`TraineeProfileData`; persistence lives in
:mod:`app.services.recommendation`.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.services.trainee_profile import TraineeProfileData

CRITERIA_WEIGHTS: Mapping[str, int] = MappingProxyType({
    "age": 15,
    "goals": 30,
    "fitness_level": 20,
    "equipment_availability": 25,
    "time_availability": 10,
})

FITNESS_LEVELS: Mapping[str, int] = MappingProxyType({
    "beginner": 1,
    "intermediate": 2,
    "advanced": 3,
})
DEFAULT_FITNESS_LEVEL = 2

AGE_PENALTY_PER_YEAR = 5
FITNESS_PENALTY_PER_LEVEL = 30
PARTIAL_TIME_SCORE = 50
MAX_CONFIDENCE = 95
MAX_SUCCESS_PROBABILITY = 90


@dataclass(frozen=True)
class MatchResult:
    overall_score: int
    confidence: int
    success_probability: float
    reason: str
    details: Dict[str, Any]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores."""
    return int(math.floor(value + 0.5))


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


def score_age(age_range: Optional[Mapping[str, float]], age: Optional[int]) -> Dict[str, Any]:
    if not age_range:
        return {"matched": True, "score": 100, "trainee_value": age, "template_range": None}
    if age is None:
        return {"matched": False, "score": 0, "trainee_value": None, "template_range": dict(age_range)}

    low, high = age_range["min"], age_range["max"]
    matched = low <= age <= high
    if matched:
        score = 100
    else:
        midpoint = (low + high) / 2
        score = max(0, 100 - abs(age - midpoint) * AGE_PENALTY_PER_YEAR)
    return {
        "matched": matched,
        "score": round_half_up(score),
        "trainee_value": age,
        "template_range": {"min": low, "max": high},
    }


def score_goals(template_goals: Sequence[str], trainee_goals: Sequence[str]) -> Dict[str, Any]:
    template_goals = [_value(goal) for goal in template_goals or []]
    trainee_goals = list(trainee_goals or [])
    overlap = [goal for goal in template_goals if goal in trainee_goals]
    matched = bool(overlap)
    score = len(overlap) / len(trainee_goals) * 100 if matched else 0
    return {
        "matched": matched,
        "score": round_half_up(score),
        "trainee_goals": trainee_goals,
        "template_goals": template_goals,
        "overlap": overlap,
    }


def score_fitness_level(template_levels: Sequence[str], fitness_level: Optional[str]) -> Dict[str, Any]:
    template_levels = [_value(level) for level in template_levels or []]
    if not template_levels:
        return {"matched": True, "score": 100, "trainee_value": fitness_level, "template_values": []}

    matched = fitness_level in template_levels
    if matched:
        score = 100
    else:
        trainee_rank = FITNESS_LEVELS.get(fitness_level, DEFAULT_FITNESS_LEVEL)
        ranks = [FITNESS_LEVELS.get(level, DEFAULT_FITNESS_LEVEL) for level in template_levels]
        closest = min(ranks, key=lambda rank: abs(rank - trainee_rank))
        score = max(0, 100 - abs(trainee_rank - closest) * FITNESS_PENALTY_PER_LEVEL)
    return {
        "matched": matched,
        "score": round_half_up(score),
        "trainee_value": fitness_level,
        "template_values": template_levels,
    }


def score_equipment(required: Sequence[str], available: Sequence[str]) -> Dict[str, Any]:
    required = list(required or [])
    available = list(available or [])
    missing = [item for item in required if item not in available]
    score = (len(required) - len(missing)) / len(required) * 100 if required else 100
    return {
        "matched": not missing,
        "score": round_half_up(score),
        "trainee_equipment": available,
        "required_equipment": required,
        "missing_equipment": missing,
    }


def score_time(requirement: Optional[Mapping[str, Any]], profile: TraineeProfileData) -> Dict[str, Any]:
    availability = (
        {"minutes_per_day": profile.minutes_per_day, "days_per_week": profile.days_per_week}
        if profile.has_time_availability
        else None
    )
    if not requirement or availability is None:
        return {
            "matched": True,
            "score": 100,
            "trainee_availability": availability,
            "template_requirement": dict(requirement) if requirement else None,
        }

    minutes = profile.minutes_per_day
    max_minutes = requirement.get("max_minutes_per_day")
    matched = (
        minutes >= requirement.get("min_minutes_per_day", 0)
        and (max_minutes is None or minutes <= max_minutes)
        and profile.days_per_week >= requirement.get("days_per_week", 0)
    )
    return {
        "matched": matched,
        "score": 100 if matched else PARTIAL_TIME_SCORE,
        "trainee_availability": availability,
        "template_requirement": dict(requirement),
    }


def build_reason(criteria: Mapping[str, Mapping[str, Any]], overall_score: int) -> str:
    clauses: List[str] = []
    goals = criteria.get("goals", {})
    if goals.get("matched"):
        clauses.append(f"Aligns with your {', '.join(goals['overlap'])} goals")
    fitness = criteria.get("fitness_level", {})
    if fitness.get("matched") and fitness.get("trainee_value"):
        clauses.append(f"Matches your {fitness['trainee_value']} fitness level")
    if criteria.get("equipment_availability", {}).get("matched"):
        clauses.append("You have all required equipment")
    if criteria.get("age", {}).get("matched"):
        clauses.append("Age-appropriate program")

    if overall_score >= 90:
        tier = "Excellent match!"
    elif overall_score >= 75:
        tier = "Great fit!"
    else:
        tier = "Good option."

    if not clauses:
        return tier
    return f"{tier} {', '.join(clauses)}."


def score_template(template: Any, profile: TraineeProfileData) -> MatchResult:
    """
    Score ``template`` against ``profile``.

    ``template`` is anything exposing ``target_criteria``,
    ``equipment_required``, ``usage_count`` and ``success_rate``; the ORM
    :class:`Template` qualifies.
    """
    criteria_config = template.target_criteria or {}
    criteria = {
        "age": score_age(criteria_config.get("age_range"), profile.age),
        "goals": score_goals(criteria_config.get("goals", []), profile.goals),
        "fitness_level": score_fitness_level(criteria_config.get("fitness_level", []), profile.fitness_level),
        "equipment_availability": score_equipment(template.equipment_required, profile.equipment),
        "time_availability": score_time(criteria_config.get("time_availability"), profile),
    }

    total = sum(criteria[name]["score"] * weight / 100 for name, weight in CRITERIA_WEIGHTS.items())
    max_total = sum(CRITERIA_WEIGHTS.values())
    overall_score = round_half_up(total / max_total * 100)

    usage_count = template.usage_count or 0
    success_rate = float(template.success_rate or Decimal("0"))
    confidence = min(MAX_CONFIDENCE, overall_score + usage_count * 2)
    success_probability = min(MAX_SUCCESS_PROBABILITY, success_rate + overall_score * 0.5)
    reason = build_reason(criteria, overall_score)

    details = {
        "criteria_matches": criteria,
        "overall_match_score": overall_score,
        "success_probability": success_probability,
        "recommendation_reason": reason,
    }
    return MatchResult(
        overall_score=overall_score,
        confidence=confidence,
        success_probability=success_probability,
        reason=reason,
        details=details,
    )
