from sqlalchemy import DECIMAL, JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class TraineeProfile(Base):
    """Fitness profile used to match templates to a trainee."""

    __tablename__ = "trainee_profiles"

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    age = Column(Integer)
    gender = Column(String(20))
    fitness_level = Column(String(20))
    goals = Column(JSON, default=list)
    weight_kg = Column(DECIMAL(6, 2))
    height_cm = Column(DECIMAL(6, 2))
    equipment = Column(JSON, default=list)
    dietary_restrictions = Column(JSON, default=list)
    minutes_per_day = Column(Integer)
    days_per_week = Column(Integer)

    user = relationship("User", back_populates="profile")
