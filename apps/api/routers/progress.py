"""
Progress API Endpoints

Dashboard numbers derived from the activity logs and the profile:
workout streaks, plan completion, BMI and weight history.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from dataclasses import asdict
from datetime import datetime, timezone

from core.database import get_db
from core.document_store import DocumentStore
from core.session import UserSession, get_user_session
from models import ActivityLog, WorkoutPlan
from schemas import BMICategory, PlanStatus, ProgressRange
from services.bmi_calculator import (
    calculate_bmi,
    calculate_bmi_trend,
    get_bmi_category,
    get_healthy_weight_range,
)
from services.progress_stats import (
    build_weight_history,
    calculate_best_streak,
    calculate_completion_stats,
    calculate_current_streak,
    weight_change,
)

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class StreakSummary(BaseModel):
    current: int
    best: int


class CompletionSummary(BaseModel):
    total_completed: int
    total_planned: int
    completion_rate: int
    last_7_days: int
    last_30_days: int
    average_per_week: float


class ProgressSummaryResponse(BaseModel):
    streak: StreakSummary
    completion: CompletionSummary
    total_minutes: float
    total_calories: float
    active_plan_id: Optional[str] = None


class BMIProgressResponse(BaseModel):
    bmi: float
    category: BMICategory
    weight_kg: float
    height_cm: float
    healthy_weight_min: float
    healthy_weight_max: float
    target_weight_kg: Optional[float] = None
    trend_percent: float


class WeightPointResponse(BaseModel):
    date: datetime
    weight_kg: float
    bmi: Optional[float] = None


class WeightHistoryResponse(BaseModel):
    range: ProgressRange
    points: List[WeightPointResponse]
    change_kg: float
    change_percent: float


def _user_logs(db: Session, session: UserSession) -> List[ActivityLog]:
    return DocumentStore(db, ActivityLog).query(user_id=session.user_id, order_by="date")


@router.get("/summary", response_model=ProgressSummaryResponse)
def get_progress_summary(
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Streaks and completion against the active plan (0 planned when there is none)."""
    logs = _user_logs(db, session)
    active = DocumentStore(db, WorkoutPlan).query(
        order_by="generated_at",
        descending=True,
        limit=1,
        user_id=session.user_id,
        status=PlanStatus.ACTIVE.value,
    )
    total_planned = len(active[0].daily_workouts) if active else 0
    stats = calculate_completion_stats(logs, total_planned)

    return ProgressSummaryResponse(
        streak=StreakSummary(
            current=calculate_current_streak(logs),
            best=calculate_best_streak(logs),
        ),
        completion=CompletionSummary(**asdict(stats)),
        total_minutes=sum(log.duration_minutes or 0 for log in logs),
        total_calories=sum(log.calories_burned or 0 for log in logs),
        active_plan_id=str(active[0].id) if active else None,
    )


@router.get("/bmi", response_model=BMIProgressResponse)
def get_bmi_progress(
    range_: ProgressRange = Query(default=ProgressRange.MONTH, alias="range"),
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Current BMI from the profile, with the change since the start of the range."""
    profile = session.require_profile()
    missing = [f for f in ("weight_kg", "height_cm") if getattr(profile, f) is None]
    if missing:
        session.require_profile(missing_fields=missing)

    bmi = calculate_bmi(profile.weight_kg, profile.height_cm)
    healthy = get_healthy_weight_range(profile.height_cm)

    history = build_weight_history(_user_logs(db, session), profile.height_cm, range_)
    previous = history[0].bmi if history else bmi

    return BMIProgressResponse(
        bmi=bmi,
        category=get_bmi_category(bmi),
        weight_kg=profile.weight_kg,
        height_cm=profile.height_cm,
        healthy_weight_min=healthy["min"],
        healthy_weight_max=healthy["max"],
        target_weight_kg=profile.target_weight_kg,
        trend_percent=round(calculate_bmi_trend(bmi, previous), 1),
    )


@router.get("/weight-history", response_model=WeightHistoryResponse)
def get_weight_history(
    range_: ProgressRange = Query(default=ProgressRange.MONTH, alias="range"),
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Logged weights in the range, oldest first, with BMI when height is known."""
    height = session.profile.height_cm if session.profile else None
    points = build_weight_history(_user_logs(db, session), height, range_, now=datetime.now(timezone.utc))
    change = weight_change(points)

    return WeightHistoryResponse(
        range=range_,
        points=[WeightPointResponse(date=p.date, weight_kg=p.weight_kg, bmi=p.bmi) for p in points],
        change_kg=change["kg"],
        change_percent=change["percent"],
    )
