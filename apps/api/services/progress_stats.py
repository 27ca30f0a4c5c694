"""
Progress Statistics Service

Workout streaks, completion stats and weight history, computed from a
user's activity logs. Everything here is pure: callers load the logs.

Streak rule: workouts on distinct calendar days (UTC) form a streak as long
as no more than one day is skipped between them.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, Set
from uuid import UUID
import math

from schemas import ActivityType, ProgressRange
from services.bmi_calculator import calculate_bmi
from services.workout_utils import ensure_utc

# Consecutive workout days may be at most this many calendar days apart
MAX_STREAK_GAP_DAYS = 2

RANGE_DAYS = {
    ProgressRange.WEEK: 7,
    ProgressRange.MONTH: 30,
    ProgressRange.QUARTER: 90,
}


@dataclass
class CompletionStats:
    total_completed: int
    total_planned: int
    completion_rate: int  # Percent of planned workouts done
    last_7_days: int
    last_30_days: int
    average_per_week: float


@dataclass
class WeightPoint:
    date: datetime
    weight_kg: float
    bmi: Optional[float]


def _get(obj: Any, name: str):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _is_workout(log: Any) -> bool:
    return ActivityType(_get(log, "type")) == ActivityType.WORKOUT


def workout_dates(logs: Iterable[Any]) -> List[date]:
    """Distinct UTC calendar days with at least one workout, newest first."""
    days: Set[date] = {ensure_utc(_get(log, "date")).date() for log in logs if _is_workout(log)}
    return sorted(days, reverse=True)


def calculate_current_streak(logs: Iterable[Any], today: Optional[date] = None) -> int:
    """
    Length of the streak that is still alive.

    A streak is alive when the latest workout was today or yesterday.
    """
    today = today or datetime.now(timezone.utc).date()
    days = workout_dates(logs)
    if not days or (today - days[0]).days > 1:
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days > MAX_STREAK_GAP_DAYS:
            break
        streak += 1
    return streak


def calculate_best_streak(logs: Iterable[Any]) -> int:
    days = sorted(workout_dates(logs))
    if not days:
        return 0

    best = current = 1
    for older, newer in zip(days, days[1:]):
        if (newer - older).days <= MAX_STREAK_GAP_DAYS:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def calculate_completion_stats(
    logs: Iterable[Any],
    total_planned: int,
    now: Optional[datetime] = None,
) -> CompletionStats:
    now = ensure_utc(now) or datetime.now(timezone.utc)
    dates = [ensure_utc(_get(log, "date")) for log in logs if _is_workout(log)]
    total = len(dates)

    rate = round(total / total_planned * 100) if total_planned > 0 else 0

    weeks_active = 1
    if dates:
        elapsed = (now - min(dates)).total_seconds()
        weeks_active = max(1, math.ceil(elapsed / timedelta(weeks=1).total_seconds()))

    return CompletionStats(
        total_completed=total,
        total_planned=total_planned,
        completion_rate=rate,
        last_7_days=sum(1 for d in dates if d >= now - timedelta(days=7)),
        last_30_days=sum(1 for d in dates if d >= now - timedelta(days=30)),
        average_per_week=round(total / weeks_active, 1),
    )


def build_weight_history(
    logs: Iterable[Any],
    height_cm: Optional[float],
    range_: ProgressRange = ProgressRange.MONTH,
    now: Optional[datetime] = None,
) -> List[WeightPoint]:
    """Logged weights inside the range window, oldest first, with BMI when height is known."""
    now = ensure_utc(now) or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=RANGE_DAYS[ProgressRange(range_)])

    points: List[WeightPoint] = []
    for log in logs:
        weight = _get(log, "weight_kg")
        logged_at = ensure_utc(_get(log, "date"))
        if weight is None or logged_at < cutoff or logged_at > now:
            continue
        bmi = calculate_bmi(weight, height_cm) if height_cm else None
        points.append(WeightPoint(date=logged_at, weight_kg=weight, bmi=bmi))

    return sorted(points, key=lambda p: p.date)


def weight_change(points: List[WeightPoint]) -> dict:
    """Change between first and last point, absolute and percent."""
    if len(points) < 2:
        return {"kg": 0.0, "percent": 0.0}
    first, last = points[0].weight_kg, points[-1].weight_kg
    change = last - first
    return {
        "kg": round(change, 1),
        "percent": round(change / first * 100, 1) if first else 0.0,
    }


def completed_days(logs: Iterable[Any], plan_id: UUID) -> List[int]:
    """Plan day numbers with a completion log, ascending."""
    days = {
        _get(log, "day_number")
        for log in logs
        if _get(log, "workout_plan_id") == plan_id and _get(log, "day_number") is not None
    }
    return sorted(days)


def is_workout_day_completed(logs: Iterable[Any], plan_id: UUID, day_number: int) -> bool:
    return day_number in completed_days(logs, plan_id)
