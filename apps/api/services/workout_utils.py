"""
Workout Plan Utilities

Structural validation for generated or user-edited plans, plus the small
read-side helpers the plan endpoints share (durations, calories, schedule
position, progress).
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional
from uuid import UUID
import math

from schemas import DailyWorkout, DayOfWeek, PlanStatus, WorkoutPlanDraft, WorkoutSet

WEEKDAY_INDEX = {
    DayOfWeek.MONDAY: 0,
    DayOfWeek.TUESDAY: 1,
    DayOfWeek.WEDNESDAY: 2,
    DayOfWeek.THURSDAY: 3,
    DayOfWeek.FRIDAY: 4,
    DayOfWeek.SATURDAY: 5,
    DayOfWeek.SUNDAY: 6,
}


@dataclass
class PlanValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)


def ensure_utc(value: Any) -> Optional[datetime]:
    """
    Coerce a date, datetime or ISO string to an aware UTC datetime.

    Naive values are taken to be UTC (SQLite drops the offset on storage).
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _get(obj: Any, name: str):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def validate_workout_plan(plan: Any) -> PlanValidation:
    """
    Check a full or partial plan and collect every violation.

    Accepts a pydantic plan model or a plain mapping. Never raises for
    malformed input; problems are reported in `errors`.
    """
    if hasattr(plan, "model_dump"):
        plan = plan.model_dump()
    plan = plan or {}
    errors: List[str] = []

    if not _get(plan, "user_id"):
        errors.append("User ID is required")

    start = _get(plan, "start_date")
    end = _get(plan, "end_date")
    if not start:
        errors.append("Start date is required")
    if not end:
        errors.append("End date is required")
    if start and end:
        try:
            if ensure_utc(end) <= ensure_utc(start):
                errors.append("End date must be after start date")
        except (TypeError, ValueError):
            errors.append("End date must be after start date")

    daily_workouts = _get(plan, "daily_workouts")
    if not daily_workouts:
        errors.append("At least one daily workout is required")
    else:
        for index, workout in enumerate(daily_workouts):
            if not _get(workout, "exercises"):
                day_number = _get(workout, "day_number") or index + 1
                errors.append(f"Day {day_number} must have at least one exercise")

    total_weeks = _get(plan, "total_weeks")
    if total_weeks is not None:
        try:
            too_short = int(total_weeks) < 1
        except (TypeError, ValueError):
            too_short = True
        if too_short:
            errors.append("Total weeks must be at least 1")

    return PlanValidation(valid=not errors, errors=errors)


def clone_workout_plan(plan: Any, customized_from: Optional[UUID] = None, now: Optional[datetime] = None) -> WorkoutPlanDraft:
    """Deep copy of a stored plan as a new custom draft linked to its source."""
    now = now or datetime.now(timezone.utc)
    return WorkoutPlanDraft(
        user_id=plan.user_id,
        name=plan.name,
        description=plan.description,
        start_date=plan.start_date,
        end_date=plan.end_date,
        status=plan.status,
        daily_workouts=[DailyWorkout.model_validate(w.model_dump()) for w in plan.daily_workouts],
        total_weeks=plan.total_weeks,
        generated_at=now,
        notes=plan.notes,
        is_custom=True,
        customized_from=customized_from or plan.id,
        fitness_level=plan.fitness_level,
    )


def create_empty_workout_plan(user_id: UUID, total_weeks: int = 4, now: Optional[datetime] = None) -> WorkoutPlanDraft:
    """Blank custom plan starting now. Days are added by the user before saving."""
    now = now or datetime.now(timezone.utc)
    return WorkoutPlanDraft(
        user_id=user_id,
        name="Custom Workout Plan",
        start_date=now,
        end_date=now + timedelta(days=total_weeks * 7),
        status=PlanStatus.ACTIVE,
        daily_workouts=[],
        total_weeks=total_weeks,
        generated_at=now,
        is_custom=True,
        notes="Custom workout plan",
    )


def calculate_plan_duration(plan: Any) -> float:
    """Total estimated minutes across all days."""
    return sum(w.estimated_duration_minutes for w in plan.daily_workouts)


def calculate_plan_calories(plan: Any) -> float:
    return sum(w.target_calories or 0 for w in plan.daily_workouts)


def get_workout_by_day(plan: Any, day_number: int) -> Optional[DailyWorkout]:
    for workout in plan.daily_workouts:
        if workout.day_number == day_number:
            return workout
    return None


def workouts_per_week(plan: Any) -> int:
    if not plan.daily_workouts or not plan.total_weeks:
        return 0
    return max(1, math.ceil(len(plan.daily_workouts) / plan.total_weeks))


def get_current_week_workouts(plan: Any, current: Optional[datetime] = None) -> List[DailyWorkout]:
    """Days scheduled in the plan week containing `current`. Empty outside the plan."""
    current = ensure_utc(current) or datetime.now(timezone.utc)
    days_since_start = (current - ensure_utc(plan.start_date)).days
    if days_since_start < 0:
        return []
    week = days_since_start // 7
    if week >= plan.total_weeks:
        return []

    per_week = workouts_per_week(plan)
    first_day = week * per_week + 1
    return [w for w in plan.daily_workouts if first_day <= w.day_number < first_day + per_week]


def get_workout_date(plan: Any, day_of_week: DayOfWeek, week: int = 0) -> datetime:
    """Calendar date of the given weekday in plan week `week` (0-based)."""
    start = ensure_utc(plan.start_date)
    offset = (WEEKDAY_INDEX[DayOfWeek(day_of_week)] - start.weekday()) % 7
    return start + timedelta(days=offset + week * 7)


def is_plan_active(plan: Any, now: Optional[datetime] = None) -> bool:
    if PlanStatus(plan.status) != PlanStatus.ACTIVE:
        return False
    now = ensure_utc(now) or datetime.now(timezone.utc)
    return now <= ensure_utc(plan.end_date)


def is_plan_expired(plan: Any, now: Optional[datetime] = None) -> bool:
    now = ensure_utc(now) or datetime.now(timezone.utc)
    return now > ensure_utc(plan.end_date)


def calculate_plan_progress(plan: Any, now: Optional[datetime] = None) -> int:
    """Elapsed share of the plan's calendar span, 0-100."""
    now = ensure_utc(now) or datetime.now(timezone.utc)
    start = ensure_utc(plan.start_date)
    end = ensure_utc(plan.end_date)
    if now < start:
        return 0
    if now > end:
        return 100
    total = (end - start).total_seconds()
    if total <= 0:
        return 100
    return round((now - start).total_seconds() / total * 100)


def format_exercise_duration(workout_set: WorkoutSet) -> str:
    if workout_set.duration_minutes:
        minutes = workout_set.duration_minutes
        return f"{int(minutes) if float(minutes).is_integer() else minutes} min"
    if workout_set.reps:
        return f"{workout_set.sets} x {workout_set.reps} reps"
    return f"{workout_set.sets} sets"


def get_total_exercises_count(workout: DailyWorkout) -> int:
    return len(workout.exercises)
