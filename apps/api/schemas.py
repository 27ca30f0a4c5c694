from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID
from typing import Optional, List


# ============ Enumerations ============

class HealthCondition(str, Enum):
    NONE = "none"
    DIABETES = "diabetes"
    HYPERTENSION = "hypertension"
    HEART_DISEASE = "heart_disease"
    ASTHMA = "asthma"
    ARTHRITIS = "arthritis"
    BACK_PAIN = "back_pain"
    KNEE_ISSUES = "knee_issues"
    SHOULDER_ISSUES = "shoulder_issues"
    HIP_ISSUES = "hip_issues"
    WRIST_PAIN = "wrist_pain"
    BALANCE_ISSUES = "balance_issues"
    OTHER = "other"


class DietaryPreference(str, Enum):
    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    PESCATARIAN = "pescatarian"
    KETO = "keto"
    PALEO = "paleo"
    OTHER = "other"


class FitnessGoal(str, Enum):
    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    MAINTENANCE = "maintenance"
    ENDURANCE = "endurance"
    FLEXIBILITY = "flexibility"
    GENERAL_HEALTH = "general_health"


class Difficulty(str, Enum):
    """Exercise difficulty tier. Doubles as the user's fitness level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


FitnessLevel = Difficulty


class ExerciseType(str, Enum):
    CARDIO = "cardio"
    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    BALANCE = "balance"


class AgeGroup(str, Enum):
    YOUTH = "youth"
    ADULT = "adult"
    SENIOR = "senior"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityType(str, Enum):
    WORKOUT = "workout"
    CARDIO = "cardio"
    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    SPORTS = "sports"
    OTHER = "other"


class ProgressRange(str, Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


def normalize_health_conditions(values: Optional[List[HealthCondition]]) -> List[HealthCondition]:
    """
    Canonical form of a condition list.

    Empty means ["none"]; "none" next to a real condition is dropped;
    duplicates are removed keeping first-seen order.
    """
    if values is None:
        return [HealthCondition.NONE]
    seen: List[HealthCondition] = []
    for value in values:
        condition = HealthCondition(value)
        if condition not in seen:
            seen.append(condition)
    real = [c for c in seen if c != HealthCondition.NONE]
    return real or [HealthCondition.NONE]


# ============ Profile ============

class ProfileBase(BaseModel):
    age: int = Field(ge=13, le=120)
    height_cm: float = Field(ge=50, le=300)
    weight_kg: float = Field(ge=20, le=500)
    health_conditions: List[HealthCondition] = Field(default_factory=lambda: [HealthCondition.NONE])
    dietary_preference: DietaryPreference
    fitness_goal: FitnessGoal
    target_weight_kg: Optional[float] = Field(default=None, ge=20, le=500)

    @field_validator("health_conditions")
    @classmethod
    def _normalize_conditions(cls, value):
        return normalize_health_conditions(value)


class ProfileCreate(ProfileBase):
    """Complete profile, as submitted at the end of onboarding."""
    pass


class ProfileUpdate(BaseModel):
    """Partial profile edit. Omitted fields keep their stored values."""
    age: Optional[int] = Field(default=None, ge=13, le=120)
    height_cm: Optional[float] = Field(default=None, ge=50, le=300)
    weight_kg: Optional[float] = Field(default=None, ge=20, le=500)
    health_conditions: Optional[List[HealthCondition]] = None
    dietary_preference: Optional[DietaryPreference] = None
    fitness_goal: Optional[FitnessGoal] = None
    target_weight_kg: Optional[float] = Field(default=None, ge=20, le=500)

    @field_validator("health_conditions")
    @classmethod
    def _normalize_conditions(cls, value):
        return normalize_health_conditions(value)

    # Only target_weight_kg may be cleared; the rest drive plan generation
    @field_validator(
        "age", "height_cm", "weight_kg", "health_conditions", "dietary_preference", "fitness_goal",
        mode="before",
    )
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("This field cannot be cleared")
        return value


class ProfileResponse(BaseModel):
    user_id: UUID
    age: Optional[int] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    health_conditions: List[HealthCondition] = Field(default_factory=list)
    dietary_preference: Optional[DietaryPreference] = None
    fitness_goal: Optional[FitnessGoal] = None
    target_weight_kg: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    bmi: Optional[float] = None
    bmi_category: Optional[BMICategory] = None

    model_config = ConfigDict(from_attributes=True)


# ============ Onboarding steps ============

class PersonalInfoStep(BaseModel):
    age: int = Field(ge=13, le=120)
    height_cm: float = Field(ge=50, le=300)
    weight_kg: float = Field(ge=20, le=500)


class HealthInfoStep(BaseModel):
    health_conditions: List[HealthCondition] = Field(default_factory=lambda: [HealthCondition.NONE])
    dietary_preference: DietaryPreference

    @field_validator("health_conditions")
    @classmethod
    def _normalize_conditions(cls, value):
        return normalize_health_conditions(value)


class FitnessGoalsStep(BaseModel):
    fitness_goal: FitnessGoal
    target_weight_kg: Optional[float] = Field(default=None, ge=20, le=500)


class OnboardingSubmission(BaseModel):
    personal: PersonalInfoStep
    health: HealthInfoStep
    goals: FitnessGoalsStep


# ============ Workout plans ============

class WorkoutSet(BaseModel):
    """
    One exercise occurrence within a day.

    Neither reps nor duration is required: holds and isometric work may
    carry only a set count.
    """
    exercise_id: str
    exercise_name: str
    sets: int = Field(ge=1)
    reps: Optional[int] = Field(default=None, ge=1)
    duration_minutes: Optional[float] = Field(default=None, gt=0)
    rest_seconds: int = Field(default=60, ge=0)
    notes: Optional[str] = None


class DailyWorkout(BaseModel):
    # Empty exercise lists are accepted here and reported by the plan validator
    day_number: int = Field(ge=1)
    day_of_week: DayOfWeek
    title: str
    description: Optional[str] = None
    exercises: List[WorkoutSet] = Field(default_factory=list)
    estimated_duration_minutes: float = Field(default=0, ge=0)
    target_calories: Optional[float] = Field(default=None, ge=0)


class WorkoutPlanDraft(BaseModel):
    """An unsaved plan: what the generator and the plan helpers return."""
    user_id: Optional[UUID] = None
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: PlanStatus = PlanStatus.ACTIVE
    daily_workouts: List[DailyWorkout] = Field(default_factory=list)
    total_weeks: int
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    notes: Optional[str] = None
    is_custom: bool = False
    customized_from: Optional[UUID] = None
    fitness_level: Optional[Difficulty] = None


class WorkoutPlanCreate(BaseModel):
    """
    A custom plan submitted by the user.

    Structural rules (dates, days, weeks) are checked by the plan validator
    so that every violation is reported at once.
    """
    name: str = "Custom Workout Plan"
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: PlanStatus = PlanStatus.ACTIVE
    daily_workouts: List[DailyWorkout] = Field(default_factory=list)
    total_weeks: Optional[int] = None
    notes: Optional[str] = None


class WorkoutPlanUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[PlanStatus] = None
    daily_workouts: Optional[List[DailyWorkout]] = None
    total_weeks: Optional[int] = None
    notes: Optional[str] = None


class WorkoutPlanResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: PlanStatus
    daily_workouts: List[DailyWorkout]
    total_weeks: int
    generated_at: datetime
    notes: Optional[str] = None
    is_custom: bool = False
    customized_from: Optional[UUID] = None
    fitness_level: Optional[Difficulty] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlanValidationResponse(BaseModel):
    valid: bool
    errors: List[str]


# ============ Activity logs ============

class ActivityLogCreate(BaseModel):
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: ActivityType
    duration_minutes: float = Field(ge=1)
    calories_burned: Optional[float] = Field(default=None, ge=0)
    workout_plan_id: Optional[UUID] = None
    day_number: Optional[int] = Field(default=None, ge=1)
    exercises_completed: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    weight_kg: Optional[float] = Field(default=None, ge=20, le=500)


class ActivityLogResponse(BaseModel):
    id: UUID
    user_id: UUID
    date: datetime
    type: ActivityType
    duration_minutes: float
    calories_burned: Optional[float] = None
    workout_plan_id: Optional[UUID] = None
    day_number: Optional[int] = None
    exercises_completed: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    weight_kg: Optional[float] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutCompletionRequest(BaseModel):
    """Marks one plan day as done. Omitted values default from the plan day."""
    exercises_completed: Optional[List[str]] = None
    duration_minutes: Optional[float] = Field(default=None, ge=1)
    calories_burned: Optional[float] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=20, le=500)
    notes: Optional[str] = None
