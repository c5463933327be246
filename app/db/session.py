import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

db_url = settings.database_url

logger.info("ENVIRONMENT = %s", settings.ENVIRONMENT)
if settings.ENVIRONMENT == "development":
    logger.info("Using LOCAL DATABASE URL")
else:
    logger.info("Using PRODUCTION DATABASE URL")

engine = create_engine(db_url, pool_pre_ping=settings.DB_POOL_PRE_PING, echo=settings.DB_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for database session.

    Yields:
        Session: Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
