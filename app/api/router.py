"""API router configuration.

This module configures the main API router and includes all endpoint routers
for different features of the application.
"""

from fastapi import APIRouter

from app.api.endpoints import health, recommendations, tasks, templates

api_router = APIRouter()

# Include all API routers
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])
