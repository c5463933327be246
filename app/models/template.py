import enum

from sqlalchemy import (
    DECIMAL,
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


class TemplateType(str, enum.Enum):
    weight_loss = "weight_loss"
    muscle_gain = "muscle_gain"
    strength_building = "strength_building"
    endurance = "endurance"
    general_fitness = "general_fitness"
    cutting = "cutting"
    bulking = "bulking"
    maintenance = "maintenance"
    rehabilitation = "rehabilitation"
    beginner_program = "beginner_program"
    intermediate_program = "intermediate_program"
    advanced_program = "advanced_program"


class TemplateStatus(str, enum.Enum):
    draft = "draft"
    active = "active"
    archived = "archived"
    published = "published"


class DifficultyLevel(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class Template(Base):
    __tablename__ = "templates"

    name = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    template_type = Column(Enum(TemplateType, name="template_type"), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(TemplateStatus, name="template_status"), default=TemplateStatus.draft, nullable=False, index=True)
    duration_weeks = Column(Integer, nullable=False)
    difficulty = Column(Enum(DifficultyLevel, name="difficulty_level"), nullable=False, index=True)
    schedule = Column(JSON, nullable=False)  # week -> day -> {workouts, meals, rest_day}
    target_criteria = Column(JSON, nullable=False)
    nutrition_targets = Column(JSON, nullable=False)
    fitness_targets = Column(JSON, nullable=False)
    equipment_required = Column(JSON, default=list)
    prerequisites = Column(JSON)
    tags = Column(JSON, default=list)
    is_public = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    average_rating = Column(DECIMAL(3, 2), default=0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)
    estimated_weekly_cost = Column(DECIMAL(8, 2))
    success_rate = Column(DECIMAL(5, 2), default=0, nullable=False)
    published_at = Column(DateTime)

    coach = relationship("User", foreign_keys=[coach_id])
    assignments = relationship("TemplateAssignment", back_populates="template", passive_deletes=True)
