"""Type-specific task payloads.

``task_config`` and ``submission_data`` are stored as JSON objects keyed by
task type, e.g. ``{"workout": {"workout_id": "..."}}``. Each task type has one
variant model for its configuration and one for its submission payload; the
lookup tables below cover every :class:`TaskType` member.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.models.task import TaskType


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# --- task_config variants ---------------------------------------------------

class WorkoutConfig(PayloadModel):
    workout_id: str = Field(..., min_length=1, description="Workout to complete")
    target_sets: Optional[int] = Field(default=None, ge=1)
    target_reps: Optional[int] = Field(default=None, ge=1)
    target_weight: Optional[float] = Field(default=None, ge=0)
    target_duration: Optional[int] = Field(default=None, ge=1, description="Minutes")
    notes: Optional[str] = None


class MealLogConfig(PayloadModel):
    meals_to_log: List[str] = Field(..., min_length=1)
    include_photos: bool = False
    track_macros: bool = False
    specific_meals: Optional[List[str]] = None


class WeightCheckConfig(PayloadModel):
    unit: Literal["kg", "lbs"]
    time_of_day: Optional[str] = None
    instructions: Optional[str] = None
    target_weight: Optional[float] = Field(default=None, gt=0)


class ProgressPhotoConfig(PayloadModel):
    angles: List[str] = Field(..., min_length=1)
    lighting: Optional[str] = None
    clothing: Optional[str] = None
    location: Optional[str] = None


class MeasurementConfig(PayloadModel):
    body_parts: List[str] = Field(..., min_length=1)
    unit: Literal["cm", "inch"] = "cm"
    instructions: Optional[str] = None
    target_measurements: Optional[Dict[str, float]] = None


class HabitTarget(PayloadModel):
    name: str = Field(..., min_length=1)
    target_count: Optional[int] = Field(default=None, ge=0)
    target_hours: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None


class HabitTrackingConfig(PayloadModel):
    habits: List[HabitTarget] = Field(..., min_length=1)


class ReflectionConfig(PayloadModel):
    questions: List[str] = Field(..., min_length=1)
    min_words: Optional[int] = Field(default=None, ge=0)
    categories: Optional[List[str]] = None


class QuizQuestion(PayloadModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)


class EducationConfig(PayloadModel):
    content_type: Literal["article", "video", "podcast"]
    content_url: Optional[str] = None
    content_title: Optional[str] = None
    expected_read_time: Optional[int] = Field(default=None, ge=0)
    quiz_questions: Optional[List[QuizQuestion]] = None


class GoalSettingConfig(PayloadModel):
    categories: List[str] = Field(..., min_length=1)
    timeframe: Optional[str] = None
    smart_criteria: bool = False
    template_goals: Optional[List[str]] = None


class CustomConfig(PayloadModel):
    instructions: str = Field(..., min_length=1)
    requirements: Optional[List[str]] = None
    attachments: Optional[List[str]] = None


# --- submission_data variants -----------------------------------------------

class ExerciseCompletion(PayloadModel):
    exercise_id: str
    completed: bool
    sets: int = Field(..., ge=0)
    reps: List[int] = Field(default_factory=list)
    weight: List[float] = Field(default_factory=list)
    notes: Optional[str] = None


class WorkoutSubmission(PayloadModel):
    actual_sets: Optional[int] = Field(default=None, ge=0)
    actual_reps: Optional[List[int]] = None
    actual_weight: Optional[List[float]] = None
    duration: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None
    exercise_completions: Optional[List[ExerciseCompletion]] = None


class Macros(PayloadModel):
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class LoggedMeal(PayloadModel):
    type: str
    foods: List[str] = Field(default_factory=list)
    calories: float = Field(default=0, ge=0)
    macros: Optional[Macros] = None
    photo: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None


class MealLogSubmission(PayloadModel):
    meals: List[LoggedMeal] = Field(..., min_length=1)
    total_calories: Optional[float] = Field(default=None, ge=0)
    total_macros: Optional[Macros] = None
    water_intake: Optional[float] = Field(default=None, ge=0)


class WeightCheckSubmission(PayloadModel):
    weight: float = Field(..., gt=0)
    unit: Literal["kg", "lbs"] = "kg"
    time_of_day: Optional[str] = None
    notes: Optional[str] = None
    trend: Optional[Literal["increasing", "decreasing", "stable"]] = None


class Photo(PayloadModel):
    angle: str
    url: str
    timestamp: Optional[datetime] = None


class ProgressPhotoSubmission(PayloadModel):
    photos: List[Photo] = Field(..., min_length=1)
    lighting: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class BodyMeasurement(PayloadModel):
    body_part: str
    value: float = Field(..., gt=0)
    unit: Literal["cm", "inch"] = "cm"
    notes: Optional[str] = None


class MeasurementSubmission(PayloadModel):
    measurements: List[BodyMeasurement] = Field(..., min_length=1)
    notes: Optional[str] = None


class HabitEntry(PayloadModel):
    name: str
    completed: float = Field(..., ge=0)
    target: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    notes: Optional[str] = None


class HabitTrackingSubmission(PayloadModel):
    habits: List[HabitEntry] = Field(..., min_length=1)
    overall_score: Optional[float] = Field(default=None, ge=0)


class ReflectionResponse(PayloadModel):
    question: str
    answer: str = Field(..., min_length=1)


class ReflectionSubmission(PayloadModel):
    responses: List[ReflectionResponse] = Field(..., min_length=1)
    word_count: Optional[int] = Field(default=None, ge=0)
    mood: Optional[str] = None
    overall_rating: Optional[int] = Field(default=None, ge=1, le=10)


class QuizAnswer(PayloadModel):
    question: int = Field(..., ge=0)
    answer: int = Field(..., ge=0)
    correct: bool


class EducationSubmission(PayloadModel):
    completed: bool
    time_spent: Optional[int] = Field(default=None, ge=0, description="Minutes")
    quiz: Optional[List[QuizAnswer]] = None
    score: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SmartGoal(PayloadModel):
    category: str
    goal: str = Field(..., min_length=1)
    specific: bool = False
    measurable: bool = False
    achievable: bool = False
    relevant: bool = False
    time_bound: bool = False
    deadline: Optional[datetime] = None


class GoalSettingSubmission(PayloadModel):
    goals: List[SmartGoal] = Field(..., min_length=1)
    confidence: Optional[int] = Field(default=None, ge=1, le=10)


class CustomSubmission(PayloadModel):
    text: Optional[str] = None
    files: Optional[List[str]] = None
    data: Optional[Dict[str, Any]] = None


TASK_CONFIG_MODELS: Mapping[TaskType, Type[PayloadModel]] = MappingProxyType({
    TaskType.workout: WorkoutConfig,
    TaskType.meal_log: MealLogConfig,
    TaskType.weight_check: WeightCheckConfig,
    TaskType.progress_photo: ProgressPhotoConfig,
    TaskType.measurement: MeasurementConfig,
    TaskType.habit_tracking: HabitTrackingConfig,
    TaskType.reflection: ReflectionConfig,
    TaskType.education: EducationConfig,
    TaskType.goal_setting: GoalSettingConfig,
    TaskType.custom: CustomConfig,
})

SUBMISSION_DATA_MODELS: Mapping[TaskType, Type[PayloadModel]] = MappingProxyType({
    TaskType.workout: WorkoutSubmission,
    TaskType.meal_log: MealLogSubmission,
    TaskType.weight_check: WeightCheckSubmission,
    TaskType.progress_photo: ProgressPhotoSubmission,
    TaskType.measurement: MeasurementSubmission,
    TaskType.habit_tracking: HabitTrackingSubmission,
    TaskType.reflection: ReflectionSubmission,
    TaskType.education: EducationSubmission,
    TaskType.goal_setting: GoalSettingSubmission,
    TaskType.custom: CustomSubmission,
})


class PayloadError(ValueError):
    """Raised when a tagged payload does not match its task type."""


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def _validate_branch(
    models: Mapping[TaskType, Type[PayloadModel]],
    task_type: TaskType,
    payload: Any,
    label: str,
) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise PayloadError(f"{label} must be an object keyed by task type")

    branch = task_type.value
    extra = sorted(key for key in payload if key != branch)
    if extra:
        raise PayloadError(
            f"{label} for {branch} tasks may only contain '{branch}', got: {', '.join(extra)}"
        )
    if branch not in payload or payload[branch] is None:
        raise PayloadError(f"{label} for {branch} tasks requires a '{branch}' section")

    try:
        variant = models[task_type].model_validate(payload[branch])
    except ValidationError as exc:
        raise PayloadError(f"Invalid {branch} {label.lower()}: {_format_errors(exc)}") from exc
    return {branch: variant.model_dump(mode="json", exclude_none=True)}


def validate_task_config(task_type: TaskType, config: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Validate and normalise a task configuration; ``None`` passes through."""
    if config is None:
        return None
    return _validate_branch(TASK_CONFIG_MODELS, task_type, config, "Task config")


def validate_submission_data(task_type: TaskType, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate and normalise a submission payload for ``task_type``."""
    if not data:
        raise PayloadError("Submission data is required")
    return _validate_branch(SUBMISSION_DATA_MODELS, task_type, data, "Submission data")
