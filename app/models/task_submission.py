import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class SubmissionStatus(str, enum.Enum):
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"
    needs_revision = "needs_revision"


class TaskSubmission(Base):
    __tablename__ = "task_submissions"

    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(SubmissionStatus, name="submission_status"),
        default=SubmissionStatus.submitted,
        nullable=False,
        index=True,
    )
    submission_data = Column(JSON, nullable=False)
    notes = Column(Text)
    attachments = Column(JSON, default=list)
    time_taken = Column(Integer)  # minutes
    difficulty_rating = Column(Integer)
    satisfaction_rating = Column(Integer)
    reviewed_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    coach_feedback = Column(Text)
    coach_rating = Column(Integer)
    points_awarded = Column(Integer, default=0, nullable=False)
    is_latest = Column(Boolean, default=True, nullable=False)
    submission_number = Column(Integer, default=1, nullable=False)
    reviewed_at = Column(DateTime)

    task = relationship("Task", back_populates="submissions")
    submitted_by = relationship("User", foreign_keys=[submitted_by_id])
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])
