import enum

from sqlalchemy import JSON, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class AssignmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    active = "active"
    paused = "paused"
    completed = "completed"
    cancelled = "cancelled"


class TemplateAssignment(Base):
    __tablename__ = "template_assignments"

    template_id = Column(String(36), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    trainee_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(AssignmentStatus, name="assignment_status"),
        default=AssignmentStatus.scheduled,
        nullable=False,
        index=True,
    )
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    customizations = Column(JSON)
    instructions = Column(Text)
    priority = Column(Integer, default=1, nullable=False)
    progress = Column(JSON)
    auto_adjustments = Column(JSON)
    actual_start_date = Column(DateTime)
    completed_at = Column(DateTime)

    template = relationship("Template", back_populates="assignments")
    trainee = relationship("User", foreign_keys=[trainee_id])
    coach = relationship("User", foreign_keys=[coach_id])
