"""Template assignment and recommendation schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.template import DifficultyLevel, TemplateType
from app.models.template_assignment import AssignmentStatus
from app.schemas.base import PaginationMeta, UserSummary


class WorkoutSwap(BaseModel):
    original_workout_id: str
    replacement_workout_id: str
    reason: str
    week: int = Field(..., ge=1)
    day: int = Field(..., ge=1)


class MealSwap(BaseModel):
    original_meal_id: str
    replacement_meal_id: str
    reason: str
    week: int = Field(..., ge=1)
    day: int = Field(..., ge=1)


class NutritionAdjustment(BaseModel):
    daily_calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    reason: str


class ScheduleAdjustment(BaseModel):
    week: int = Field(..., ge=1)
    day: int = Field(..., ge=1)
    original_time_slot: str
    new_time_slot: str
    reason: str


class AssignmentCustomizations(BaseModel):
    modified_workouts: Optional[List[WorkoutSwap]] = None
    modified_meals: Optional[List[MealSwap]] = None
    nutrition_adjustments: Optional[NutritionAdjustment] = None
    schedule_adjustments: Optional[List[ScheduleAdjustment]] = None
    additional_notes: Optional[str] = None


class TemplateAssign(BaseModel):
    template_id: str
    trainee_id: str
    start_date: date
    instructions: Optional[str] = None
    priority: int = Field(default=1, ge=1, le=5)
    customizations: Optional[AssignmentCustomizations] = None


class AssignmentUpdate(BaseModel):
    status: Optional[AssignmentStatus] = None
    instructions: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)
    customizations: Optional[AssignmentCustomizations] = None

    @field_validator("priority")
    @classmethod
    def reject_null(cls, value: Optional[int]) -> int:
        if value is None:
            raise ValueError("may not be null")
        return value


class AssignmentProgressUpdate(BaseModel):
    current_week: int = Field(..., ge=1)
    current_day: int = Field(..., ge=1, le=7)
    completed_workouts: Optional[int] = Field(default=None, ge=0)
    missed_workouts: Optional[int] = Field(default=None, ge=0)
    completed_meals: Optional[int] = Field(default=None, ge=0)
    missed_meals: Optional[int] = Field(default=None, ge=0)
    adherence_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    weight_change: Optional[float] = None
    energy_level: Optional[int] = Field(default=None, ge=1, le=10)
    satisfaction: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None
    overall_rating: Optional[int] = Field(default=None, ge=1, le=5)
    feedback: Optional[str] = None


class AssignmentFilters(BaseModel):
    template_id: Optional[str] = None
    trainee_id: Optional[str] = None
    status: Optional[AssignmentStatus] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class TemplateReference(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    template_type: TemplateType
    duration_weeks: int
    difficulty: DifficultyLevel


class TemplateAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    template: Optional[TemplateReference] = None
    trainee_id: str
    trainee: Optional[UserSummary] = None
    coach_id: str
    coach: Optional[UserSummary] = None
    status: AssignmentStatus
    start_date: date
    end_date: date
    customizations: Optional[Dict[str, Any]] = None
    instructions: Optional[str] = None
    priority: int
    progress: Optional[Dict[str, Any]] = None
    auto_adjustments: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
    actual_start_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class TemplateAssignmentListResponse(PaginationMeta):
    assignments: List[TemplateAssignmentResponse]


class RecommendedTemplate(TemplateReference):
    average_rating: Decimal
    usage_count: int


class TemplateRecommendationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    template: Optional[RecommendedTemplate] = None
    trainee_id: str
    coach_id: str
    score: Decimal
    confidence: Decimal
    reason: str
    matching_details: Dict[str, Any]
    viewed: bool
    accepted: bool
    dismissed: bool
    coach_feedback: Optional[str] = None
    is_auto_generated: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    viewed_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None


class TemplateRecommendationListResponse(BaseModel):
    trainee_id: str
    total: int
    recommendations: List[TemplateRecommendationResponse]


class RecommendationDismiss(BaseModel):
    feedback: Optional[str] = Field(default=None, max_length=1000)
