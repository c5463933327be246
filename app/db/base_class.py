import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import as_declarative, declared_attr

from app.utils.time import utcnow


def generate_uuid() -> str:
    return str(uuid.uuid4())


@as_declarative()
class Base:
    """Base class for all database models."""

    # Generate tablename automatically
    @declared_attr
    def __tablename__(cls) -> str:
        """Generate database table name automatically."""
        return cls.__name__.lower()

    # Common columns for all models
    id = Column(String(36), primary_key=True, index=True, default=generate_uuid)
    # Naive UTC timestamps; see app.utils.time
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
