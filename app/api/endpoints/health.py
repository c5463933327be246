import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/app-health")
def app_health() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@router.get("/database", response_model=Dict[str, Any])
def database_health(db: Session = Depends(get_db)):
    """
    Check that the database answers a trivial query.

    Returns:
        dict: Database connectivity status
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable")

    return {
        "status": "healthy",
        "database": "connected",
        "environment": settings.ENVIRONMENT,
        "service": "coachly-backend",
    }
