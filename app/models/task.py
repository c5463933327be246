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


class TaskType(str, enum.Enum):
    workout = "workout"
    meal_log = "meal_log"
    weight_check = "weight_check"
    progress_photo = "progress_photo"
    measurement = "measurement"
    habit_tracking = "habit_tracking"
    reflection = "reflection"
    education = "education"
    goal_setting = "goal_setting"
    custom = "custom"


class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    overdue = "overdue"
    cancelled = "cancelled"


class TaskFrequency(str, enum.Enum):
    once = "once"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    custom = "custom"


class Task(Base):
    __tablename__ = "tasks"

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    task_type = Column(Enum(TaskType, name="task_type"), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    trainee_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    priority = Column(Enum(TaskPriority, name="task_priority"), default=TaskPriority.medium, nullable=False, index=True)
    status = Column(Enum(TaskStatus, name="task_status"), default=TaskStatus.pending, nullable=False, index=True)
    frequency = Column(Enum(TaskFrequency, name="task_frequency"), default=TaskFrequency.once, nullable=False)
    due_date = Column(DateTime, index=True)
    start_date = Column(DateTime)
    estimated_minutes = Column(Integer)
    task_config = Column(JSON)  # keyed by task type, one branch populated
    instructions = Column(Text)
    tags = Column(JSON, default=list)
    points = Column(Integer, default=10, nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)
    requires_approval = Column(Boolean, default=False, nullable=False)
    max_submissions = Column(Integer, default=1, nullable=False)
    allow_late_submission = Column(Boolean, default=True, nullable=False)
    reminder_settings = Column(JSON)
    recurrence_pattern = Column(JSON)
    completion_data = Column(JSON)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    parent_task_id = Column(String(36), ForeignKey("tasks.id", ondelete="SET NULL"), index=True)
    sequence_number = Column(Integer, default=1, nullable=False)

    coach = relationship("User", foreign_keys=[coach_id])
    trainee = relationship("User", foreign_keys=[trainee_id])
    submissions = relationship(
        "TaskSubmission", back_populates="task", cascade="all, delete-orphan", passive_deletes=True
    )
