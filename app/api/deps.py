"""
API dependency injection module.

This module provides dependency injection functions for API endpoints,
including database sessions, caller identity and service wiring.
"""

from fastapi import Depends

from app.db.session import get_db
from app.models.user import UserRole
from app.services.auth import get_current_active_user, require_roles
from app.services.recommendation import RecommendationService
from app.services.trainee_profile import TraineeProfileProvider, get_trainee_profile_provider

__all__ = [
    "get_db",
    "get_current_active_user",
    "get_current_coach",
    "get_current_trainee",
    "get_current_admin",
    "get_task_participant",
    "get_recommendation_service",
]

get_current_coach = require_roles(UserRole.coach)
get_current_trainee = require_roles(UserRole.trainee)
get_current_admin = require_roles(UserRole.admin)
get_task_participant = require_roles(UserRole.coach, UserRole.trainee, UserRole.admin)


def get_recommendation_service(
    profile_provider: TraineeProfileProvider = Depends(get_trainee_profile_provider),
) -> RecommendationService:
    return RecommendationService(profile_provider)
