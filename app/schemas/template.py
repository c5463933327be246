"""Template schemas.

Nested models mirror the JSON blobs stored on :class:`app.models.template.Template`.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.template import DifficultyLevel, TemplateStatus, TemplateType
from app.schemas.base import PaginationMeta, UserSummary

GenderValue = Literal["male", "female", "other"]
MealType = Literal["breakfast", "lunch", "dinner", "snack1", "snack2", "pre_workout", "post_workout"]


class WorkoutScheduleItem(BaseModel):
    workout_id: str = Field(..., min_length=1)
    time_slot: Literal["morning", "afternoon", "evening"] = "morning"
    duration: Optional[int] = Field(default=None, ge=1, description="Minutes")
    notes: Optional[str] = None


class MealScheduleItem(BaseModel):
    meal_id: str = Field(..., min_length=1)
    meal_type: MealType
    portion: float = Field(default=1.0, gt=0)
    timing: Optional[str] = None
    notes: Optional[str] = None


class Supplement(BaseModel):
    name: str
    dosage: str
    timing: str


class DaySchedule(BaseModel):
    workouts: List[WorkoutScheduleItem] = Field(default_factory=list)
    meals: List[MealScheduleItem] = Field(default_factory=list)
    rest_day: bool
    daily_notes: Optional[str] = None
    supplements: Optional[List[Supplement]] = None


def _check_schedule(schedule: Dict[str, Dict[str, DaySchedule]]) -> Dict[str, Dict[str, DaySchedule]]:
    if not schedule:
        raise ValueError("schedule must contain at least one week")
    for week, days in schedule.items():
        if not days:
            raise ValueError(f"{week} must contain at least one day")
    return schedule


# week key -> day key -> day plan, e.g. {"week1": {"day1": {...}}}
Schedule = Annotated[Dict[str, Dict[str, DaySchedule]], AfterValidator(_check_schedule)]


class NumericRange(BaseModel):
    min: float
    max: float

    @model_validator(mode="after")
    def check_bounds(self) -> "NumericRange":
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class TimeAvailability(BaseModel):
    min_minutes_per_day: int = Field(..., ge=0)
    max_minutes_per_day: Optional[int] = Field(default=None, ge=0)
    days_per_week: int = Field(..., ge=1, le=7)


class TargetCriteria(BaseModel):
    age_range: NumericRange
    gender: Optional[List[GenderValue]] = None
    fitness_level: List[DifficultyLevel] = Field(default_factory=list)
    goals: List[TemplateType] = Field(default_factory=list)
    weight_range: Optional[NumericRange] = None
    height_range: Optional[NumericRange] = None
    activity_level: Optional[
        List[Literal["sedentary", "lightly_active", "moderately_active", "very_active", "extremely_active"]]
    ] = None
    medical_conditions: Optional[List[str]] = None
    dietary_restrictions: Optional[List[str]] = None
    equipment_required: Optional[List[str]] = None
    time_availability: Optional[TimeAvailability] = None


class CalorieDistribution(BaseModel):
    breakfast: float
    lunch: float
    dinner: float
    snacks: float


class NutritionTargets(BaseModel):
    daily_calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    fiber: Optional[float] = Field(default=None, ge=0)
    water: Optional[float] = Field(default=None, ge=0)
    calorie_distribution: Optional[CalorieDistribution] = None


class ExpectedOutcomes(BaseModel):
    weight_change: Optional[float] = None
    strength_increase: Optional[float] = None
    endurance_improvement: Optional[float] = None
    body_fat_change: Optional[float] = None


class ProgressMilestone(BaseModel):
    week: int = Field(..., ge=1)
    description: str
    measurable_target: str


class FitnessTargets(BaseModel):
    primary_goals: List[str] = Field(default_factory=list)
    secondary_goals: Optional[List[str]] = None
    expected_outcomes: ExpectedOutcomes = Field(default_factory=ExpectedOutcomes)
    progress_milestones: List[ProgressMilestone] = Field(default_factory=list)


class Prerequisites(BaseModel):
    fitness_requirements: Optional[List[str]] = None
    medical_clearance: Optional[bool] = None
    experience_level: Optional[str] = None
    warnings: Optional[List[str]] = None
    contraindications: Optional[List[str]] = None


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    template_type: TemplateType
    duration_weeks: int = Field(..., ge=1, le=52)
    difficulty: DifficultyLevel
    schedule: Schedule
    target_criteria: TargetCriteria
    nutrition_targets: NutritionTargets
    fitness_targets: FitnessTargets
    equipment_required: List[str] = Field(default_factory=list)
    prerequisites: Optional[Prerequisites] = None
    tags: List[str] = Field(default_factory=list)
    is_public: bool = False


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[TemplateStatus] = None
    duration_weeks: Optional[int] = Field(default=None, ge=1, le=52)
    difficulty: Optional[DifficultyLevel] = None
    schedule: Optional[Schedule] = None
    target_criteria: Optional[TargetCriteria] = None
    nutrition_targets: Optional[NutritionTargets] = None
    fitness_targets: Optional[FitnessTargets] = None
    equipment_required: Optional[List[str]] = None
    prerequisites: Optional[Prerequisites] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None

    @field_validator(
        "name", "status", "duration_weeks", "difficulty", "schedule",
        "target_criteria", "nutrition_targets", "fitness_targets", "is_public",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TemplateFilters(BaseModel):
    template_type: Optional[TemplateType] = None
    status: Optional[TemplateStatus] = None
    difficulty: Optional[DifficultyLevel] = None
    include_public: bool = False
    tags: Optional[List[str]] = None
    min_rating: Optional[float] = Field(default=None, ge=0, le=5)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_by: Literal["name", "created_at", "usage_count", "average_rating", "success_rate"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    template_type: TemplateType
    coach_id: str
    coach: Optional[UserSummary] = None
    status: TemplateStatus
    duration_weeks: int
    difficulty: DifficultyLevel
    schedule: Dict[str, Dict[str, dict]]
    target_criteria: dict
    nutrition_targets: dict
    fitness_targets: dict
    equipment_required: List[str] = Field(default_factory=list)
    prerequisites: Optional[dict] = None
    tags: List[str] = Field(default_factory=list)
    is_public: bool
    usage_count: int
    average_rating: Decimal
    rating_count: int
    success_rate: Decimal
    estimated_weekly_cost: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None

    @field_validator("equipment_required", "tags", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class TemplateListResponse(PaginationMeta):
    templates: List[TemplateResponse]
