"""
Shared service utilities.

This module provides transaction management and query helpers used by all
services that work with a synchronous SQLAlchemy session.
"""

import logging
from typing import Any, Optional, Tuple, Type, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Unit of work over a database session.

    Every write issued inside the ``with`` block is committed together when
    the block exits normally and rolled back when it raises. Database errors
    are surfaced as a 500 ``HTTPException``; other exceptions propagate
    unchanged after the rollback.

    Example::

        with TransactionManager(db):
            db.add(submission)
            task.status = TaskStatus.completed
    """

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> "TransactionManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
            if issubclass(exc_type, SQLAlchemyError):
                logger.error(f"Transaction rolled back after database error: {exc_val}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Database error while saving changes",
                ) from exc_val
            return False
        self.commit()
        return False

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Database error while saving changes",
            ) from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Error rolling back transaction: {e}")
            raise


def get_or_404(db: Session, model: Type[ModelType], id: Any, detail: Optional[str] = None, **filters) -> ModelType:
    """Load one row by primary key (plus optional equality filters) or raise 404."""
    query = db.query(model).filter(model.id == id)
    for column, value in filters.items():
        query = query.filter(getattr(model, column) == value)
    instance = query.first()
    if instance is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or f"{model.__name__} not found",
        )
    return instance


def paginate(query: Query, page: int, page_size: int) -> Tuple[list, int]:
    """Return one page of ``query`` together with the unpaginated count."""
    total_count = query.order_by(None).count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, total_count
