"""Trainee profile read port used by the recommendation engine."""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from sqlalchemy.orm import Session

from app.models.trainee_profile import TraineeProfile


@dataclass(frozen=True)
class TraineeProfileData:
    """Immutable snapshot of the trainee attributes the scorer reads."""

    trainee_id: str
    age: Optional[int] = None
    gender: Optional[str] = None
    fitness_level: Optional[str] = None
    goals: List[str] = field(default_factory=list)
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    equipment: List[str] = field(default_factory=list)
    dietary_restrictions: List[str] = field(default_factory=list)
    minutes_per_day: Optional[int] = None
    days_per_week: Optional[int] = None

    @property
    def has_time_availability(self) -> bool:
        return self.minutes_per_day is not None and self.days_per_week is not None


class TraineeProfileProvider(Protocol):
    def get_profile(self, db: Session, trainee_id: str) -> TraineeProfileData:
        ...


class DatabaseTraineeProfileProvider:
    """Loads profiles from the ``trainee_profiles`` table.

    A trainee without a stored profile yields an empty snapshot, which scores
    low on every criterion that needs data.
    """

    def get_profile(self, db: Session, trainee_id: str) -> TraineeProfileData:
        row = db.query(TraineeProfile).filter(TraineeProfile.user_id == trainee_id).first()
        if row is None:
            return TraineeProfileData(trainee_id=trainee_id)

        return TraineeProfileData(
            trainee_id=trainee_id,
            age=row.age,
            gender=row.gender,
            fitness_level=row.fitness_level,
            goals=list(row.goals or []),
            weight_kg=float(row.weight_kg) if row.weight_kg is not None else None,
            height_cm=float(row.height_cm) if row.height_cm is not None else None,
            equipment=list(row.equipment or []),
            dietary_restrictions=list(row.dietary_restrictions or []),
            minutes_per_day=row.minutes_per_day,
            days_per_week=row.days_per_week,
        )


def get_trainee_profile_provider() -> TraineeProfileProvider:
    """FastAPI dependency; override in tests to inject fixed profiles."""
    return DatabaseTraineeProfileProvider()
