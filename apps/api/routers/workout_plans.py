"""
Workout Plan API Endpoints

Generation, custom plans, editing, cloning and day completion.

Convention: a user has at most one active plan. Storing a new active plan
cancels the user's other active plans.
"""
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime, timezone
import logging
import math

from core.config import settings
from core.database import get_db
from core.document_store import DocumentStore
from core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ProfileRequiredError,
    ValidationError,
)
from core.session import UserSession, get_user_session
from models import ActivityLog, Profile, WorkoutPlan
from schemas import (
    ActivityLogResponse,
    ActivityType,
    DailyWorkout,
    DayOfWeek,
    PlanStatus,
    PlanValidationResponse,
    WorkoutCompletionRequest,
    WorkoutPlanCreate,
    WorkoutPlanDraft,
    WorkoutPlanResponse,
    WorkoutPlanUpdate,
    WorkoutSet,
)
from services.onboarding import validate_profile_for_workout
from services.progress_stats import completed_days, is_workout_day_completed
from services.workout_generator import (
    InsufficientExercisesError,
    PlanPolicy,
    generate_workout_plan,
)
from services.workout_templates import get_equipment_needed
from services.workout_utils import (
    calculate_plan_calories,
    calculate_plan_duration,
    calculate_plan_progress,
    clone_workout_plan,
    create_empty_workout_plan,
    ensure_utc,
    format_exercise_duration,
    get_current_week_workouts,
    get_total_exercises_count,
    get_workout_by_day,
    get_workout_date,
    is_plan_active,
    is_plan_expired,
    validate_workout_plan,
    workouts_per_week,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/workout-plans", tags=["workout_plans"])


class ExerciseDetail(BaseModel):
    exercise: WorkoutSet
    display: str


class WorkoutDayDetailResponse(BaseModel):
    plan_id: UUID
    day: DailyWorkout
    scheduled_date: datetime
    exercise_count: int
    exercises: List[ExerciseDetail]
    equipment_needed: List[str]
    completed: bool


class NextWorkout(BaseModel):
    day_number: int
    title: str
    scheduled_date: datetime


class PlanCompletionResponse(BaseModel):
    plan_id: UUID
    status: PlanStatus
    total_days: int
    completed_days: List[int]
    completion_rate: int
    progress_percent: int
    is_active: bool
    is_expired: bool
    total_duration_minutes: float
    total_calories: float
    current_week_days: List[int]
    next_workout: Optional[NextWorkout] = None


def plan_policy() -> PlanPolicy:
    return PlanPolicy(
        total_weeks=settings.PLAN_TOTAL_WEEKS,
        workout_days=tuple(DayOfWeek(d) for d in settings.plan_workout_days),
    )


def _plan_values(plan: WorkoutPlanDraft) -> Dict[str, Any]:
    """Column values for a draft. Days go to the JSON column in JSON form."""
    values = plan.model_dump(exclude={"daily_workouts", "status", "fitness_level"})
    values["daily_workouts"] = [w.model_dump(mode="json") for w in plan.daily_workouts]
    values["status"] = PlanStatus(plan.status).value
    values["fitness_level"] = plan.fitness_level.value if plan.fitness_level else None
    for key in ("start_date", "end_date", "generated_at"):
        values[key] = ensure_utc(values[key])
    return values


def _get_owned_plan(db: Session, plan_id: UUID, session: UserSession) -> WorkoutPlan:
    plan = DocumentStore(db, WorkoutPlan).get(plan_id)
    if not plan:
        raise NotFoundError("Workout plan", str(plan_id))
    if plan.user_id != session.user_id:
        raise ForbiddenError()
    return plan


def _cancel_other_active_plans(db: Session, user_id: UUID, keep_id: Optional[UUID] = None) -> None:
    store = DocumentStore(db, WorkoutPlan)
    for other in store.query(user_id=user_id, status=PlanStatus.ACTIVE.value):
        if other.id != keep_id:
            store.update(other.id, {"status": PlanStatus.CANCELLED.value})
            logger.info(
                "Cancelled previous active plan",
                extra={"extra_fields": {"user_id": str(user_id), "plan_id": str(other.id)}},
            )


def _store_plan(db: Session, draft: WorkoutPlanDraft) -> WorkoutPlan:
    if PlanStatus(draft.status) == PlanStatus.ACTIVE:
        _cancel_other_active_plans(db, draft.user_id)
    return DocumentStore(db, WorkoutPlan).put(None, _plan_values(draft))


def _require_valid(plan: Any) -> None:
    validation = validate_workout_plan(plan)
    if not validation.valid:
        raise ValidationError("Invalid workout plan", errors=validation.errors)


def _plan_logs(db: Session, plan: WorkoutPlan) -> List[ActivityLog]:
    return DocumentStore(db, ActivityLog).query(user_id=plan.user_id, workout_plan_id=plan.id)


@router.post("/generate", response_model=WorkoutPlanResponse, status_code=status.HTTP_201_CREATED)
def generate_plan(
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """
    Generate a personalized plan from the stored profile and make it active.

    Each call for the same user uses a new seed, so regenerating gives a
    different exercise selection under the same rules.
    """
    profile = session.require_profile()
    readiness = validate_profile_for_workout(profile)
    if not readiness.is_valid:
        raise ProfileRequiredError(
            "Profile is incomplete",
            missing_fields=readiness.missing_fields,
            errors=readiness.errors,
        )

    attempt = len(DocumentStore(db, WorkoutPlan).query(user_id=session.user_id))
    try:
        draft = generate_workout_plan(
            profile,
            policy=plan_policy(),
            user_id=session.user_id,
            seed=f"{session.user_id}:{attempt}",
        )
    except InsufficientExercisesError as e:
        raise ValidationError(str(e), field="health_conditions")

    plan = _store_plan(db, draft)
    return WorkoutPlanResponse.model_validate(plan)


@router.post("", response_model=WorkoutPlanResponse, status_code=status.HTTP_201_CREATED)
def create_custom_plan(
    plan_data: WorkoutPlanCreate,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Store a user-built plan. Every structural problem is reported at once (422)."""
    values = plan_data.model_dump()
    values["user_id"] = session.user_id
    if values["total_weeks"] is None and plan_data.start_date and plan_data.end_date:
        days = (ensure_utc(plan_data.end_date) - ensure_utc(plan_data.start_date)).days
        values["total_weeks"] = max(1, math.ceil(days / 7))
    _require_valid(values)

    draft = WorkoutPlanDraft(
        **values,
        generated_at=datetime.now(timezone.utc),
        is_custom=True,
    )
    plan = _store_plan(db, draft)
    return WorkoutPlanResponse.model_validate(plan)


@router.post("/draft", response_model=WorkoutPlanDraft)
def create_draft_plan(session: UserSession = Depends(get_user_session)):
    """Blank custom plan to edit client-side. Nothing is stored."""
    return create_empty_workout_plan(session.user_id, total_weeks=settings.PLAN_TOTAL_WEEKS)


@router.post("/validate", response_model=PlanValidationResponse)
def validate_plan(
    plan: Dict[str, Any] = Body(...),
    session: UserSession = Depends(get_user_session)
):
    """Dry-run the structural checks on an arbitrary plan body."""
    validation = validate_workout_plan(plan)
    return PlanValidationResponse(valid=validation.valid, errors=validation.errors)


@router.get("", response_model=List[WorkoutPlanResponse])
def list_plans(
    status_filter: Optional[PlanStatus] = Query(default=None, alias="status"),
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """The user's plans, newest first. Optionally filtered by status."""
    filters: Dict[str, Any] = {"user_id": session.user_id}
    if status_filter:
        filters["status"] = status_filter.value
    plans = DocumentStore(db, WorkoutPlan).query(order_by="generated_at", descending=True, **filters)
    return [WorkoutPlanResponse.model_validate(p) for p in plans]


@router.get("/active", response_model=WorkoutPlanResponse)
def get_active_plan(
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    plans = DocumentStore(db, WorkoutPlan).query(
        order_by="generated_at",
        descending=True,
        limit=1,
        user_id=session.user_id,
        status=PlanStatus.ACTIVE.value,
    )
    if not plans:
        raise NotFoundError("Active workout plan", str(session.user_id))
    return WorkoutPlanResponse.model_validate(plans[0])


@router.get("/{plan_id}", response_model=WorkoutPlanResponse)
def get_plan(
    plan_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    return WorkoutPlanResponse.model_validate(_get_owned_plan(db, plan_id, session))


@router.patch("/{plan_id}", response_model=WorkoutPlanResponse)
def update_plan(
    plan_id: UUID,
    plan_update: WorkoutPlanUpdate,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """
    Edit a plan. The merged result must still pass plan validation.

    Editing the days marks the plan as custom.
    """
    plan = _get_owned_plan(db, plan_id, session)
    current = WorkoutPlanResponse.model_validate(plan).model_dump()
    changes = plan_update.model_dump(exclude_unset=True)
    merged = {**current, **changes}
    _require_valid(merged)

    # Only the free-text fields may be cleared
    patch: Dict[str, Any] = {
        k: v for k, v in changes.items() if v is not None or k in ("description", "notes")
    }
    if changes.get("daily_workouts") is not None:
        patch["daily_workouts"] = [w.model_dump(mode="json") for w in plan_update.daily_workouts]
        patch["is_custom"] = True
    for key in ("start_date", "end_date"):
        if key in patch:
            patch[key] = ensure_utc(patch[key])
    if changes.get("status") is not None:
        patch["status"] = PlanStatus(changes["status"]).value
        if patch["status"] == PlanStatus.ACTIVE.value:
            _cancel_other_active_plans(db, session.user_id, keep_id=plan_id)

    updated = DocumentStore(db, WorkoutPlan).update(plan_id, patch)
    return WorkoutPlanResponse.model_validate(updated)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    _get_owned_plan(db, plan_id, session)
    DocumentStore(db, WorkoutPlan).delete(plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{plan_id}/clone", response_model=WorkoutPlanResponse, status_code=status.HTTP_201_CREATED)
def clone_plan(
    plan_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Copy a plan as a new active custom plan linked to its source."""
    source = WorkoutPlanResponse.model_validate(_get_owned_plan(db, plan_id, session))
    draft = clone_workout_plan(source)
    draft.status = PlanStatus.ACTIVE
    plan = _store_plan(db, draft)
    return WorkoutPlanResponse.model_validate(plan)


@router.get("/{plan_id}/days/{day_number}", response_model=WorkoutDayDetailResponse)
def get_plan_day(
    plan_id: UUID,
    day_number: int,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """One scheduled day with display strings, equipment and completion state."""
    plan_row = _get_owned_plan(db, plan_id, session)
    plan = WorkoutPlanResponse.model_validate(plan_row)
    day = get_workout_by_day(plan, day_number)
    if not day:
        raise NotFoundError("Workout day", str(day_number))

    per_week = workouts_per_week(plan) or 1
    return WorkoutDayDetailResponse(
        plan_id=plan.id,
        day=day,
        scheduled_date=get_workout_date(plan, day.day_of_week, week=(day.day_number - 1) // per_week),
        exercise_count=get_total_exercises_count(day),
        exercises=[ExerciseDetail(exercise=s, display=format_exercise_duration(s)) for s in day.exercises],
        equipment_needed=get_equipment_needed(s.exercise_id for s in day.exercises),
        completed=is_workout_day_completed(_plan_logs(db, plan_row), plan.id, day_number),
    )


@router.post(
    "/{plan_id}/days/{day_number}/complete",
    response_model=ActivityLogResponse,
    status_code=status.HTTP_201_CREATED,
)
def complete_plan_day(
    plan_id: UUID,
    day_number: int,
    completion: Optional[WorkoutCompletionRequest] = None,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """
    Log a plan day as done.

    Writes a "workout" activity log linked to the plan day. A reported
    weight also updates the profile. The plan is marked completed once
    every day has a log.
    """
    completion = completion or WorkoutCompletionRequest()
    plan_row = _get_owned_plan(db, plan_id, session)
    plan = WorkoutPlanResponse.model_validate(plan_row)
    day = get_workout_by_day(plan, day_number)
    if not day:
        raise NotFoundError("Workout day", str(day_number))

    logs = _plan_logs(db, plan_row)
    if is_workout_day_completed(logs, plan.id, day_number):
        raise ConflictError(f"Day {day_number} is already completed")

    exercises = completion.exercises_completed
    if exercises is None:
        exercises = [s.exercise_id for s in day.exercises]

    log = DocumentStore(db, ActivityLog).put(None, {
        "user_id": session.user_id,
        "date": datetime.now(timezone.utc),
        "type": ActivityType.WORKOUT.value,
        "duration_minutes": completion.duration_minutes or max(1, day.estimated_duration_minutes),
        "calories_burned": completion.calories_burned if completion.calories_burned is not None else day.target_calories,
        "workout_plan_id": plan.id,
        "day_number": day_number,
        "exercises_completed": exercises,
        "notes": completion.notes,
        "weight_kg": completion.weight_kg,
    })

    if completion.weight_kg is not None and session.has_profile:
        DocumentStore(db, Profile, key="user_id").update(session.user_id, {"weight_kg": completion.weight_kg})

    done = set(completed_days(logs, plan.id)) | {day_number}
    if all(w.day_number in done for w in plan.daily_workouts):
        DocumentStore(db, WorkoutPlan).update(plan.id, {"status": PlanStatus.COMPLETED.value})
        logger.info("Workout plan completed", extra={"extra_fields": {"plan_id": str(plan.id)}})

    return ActivityLogResponse.model_validate(log)


@router.get("/{plan_id}/completion", response_model=PlanCompletionResponse)
def get_plan_completion(
    plan_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Done days, calendar progress and the next scheduled workout."""
    plan_row = _get_owned_plan(db, plan_id, session)
    plan = WorkoutPlanResponse.model_validate(plan_row)
    done = completed_days(_plan_logs(db, plan_row), plan.id)
    total_days = len(plan.daily_workouts)

    next_workout = None
    per_week = workouts_per_week(plan) or 1
    for day in plan.daily_workouts:
        if day.day_number not in done:
            next_workout = NextWorkout(
                day_number=day.day_number,
                title=day.title,
                scheduled_date=get_workout_date(plan, day.day_of_week, week=(day.day_number - 1) // per_week),
            )
            break

    return PlanCompletionResponse(
        plan_id=plan.id,
        status=plan.status,
        total_days=total_days,
        completed_days=done,
        completion_rate=round(len(done) / total_days * 100) if total_days else 0,
        progress_percent=calculate_plan_progress(plan),
        is_active=is_plan_active(plan),
        is_expired=is_plan_expired(plan),
        total_duration_minutes=calculate_plan_duration(plan),
        total_calories=calculate_plan_calories(plan),
        current_week_days=[w.day_number for w in get_current_week_workouts(plan)],
        next_workout=next_workout,
    )
