"""
Activity Log API Endpoints

Logs are write-once: they can be created, read and deleted, never edited.
Workout plan days are usually completed through the workout plan endpoints;
this router also accepts free-standing activities.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from core.database import get_db
from core.document_store import DocumentStore
from core.exceptions import ForbiddenError, NotFoundError
from core.session import UserSession, get_user_session
from models import ActivityLog, Profile, WorkoutPlan
from schemas import ActivityLogCreate, ActivityLogResponse, ActivityType
from services.workout_utils import ensure_utc

router = APIRouter(prefix="/v1/activities", tags=["activities"])


def _get_owned_log(db: Session, log_id: UUID, session: UserSession) -> ActivityLog:
    log = DocumentStore(db, ActivityLog).get(log_id)
    if not log:
        raise NotFoundError("Activity log", str(log_id))
    if log.user_id != session.user_id:
        raise ForbiddenError()
    return log


@router.post("", response_model=ActivityLogResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    activity: ActivityLogCreate,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """
    Record an activity.

    A linked plan must belong to the caller. A logged weight also becomes
    the profile's current weight.
    """
    if activity.workout_plan_id is not None:
        plan = DocumentStore(db, WorkoutPlan).get(activity.workout_plan_id)
        if not plan:
            raise NotFoundError("Workout plan", str(activity.workout_plan_id))
        if plan.user_id != session.user_id:
            raise ForbiddenError()

    values = activity.model_dump()
    values["user_id"] = session.user_id
    values["date"] = ensure_utc(activity.date)
    values["type"] = activity.type.value
    log = DocumentStore(db, ActivityLog).put(None, values)

    if activity.weight_kg is not None and session.has_profile:
        DocumentStore(db, Profile, key="user_id").update(session.user_id, {"weight_kg": activity.weight_kg})

    return log


@router.get("", response_model=List[ActivityLogResponse])
def list_activities(
    activity_type: Optional[ActivityType] = Query(default=None, alias="type"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(default=100, ge=1, le=500),
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """The user's logs, newest first, optionally narrowed by type and date range."""
    query = db.query(ActivityLog).filter(ActivityLog.user_id == session.user_id)

    if activity_type:
        query = query.filter(ActivityLog.type == activity_type.value)
    if start_date:
        query = query.filter(ActivityLog.date >= ensure_utc(start_date))
    if end_date:
        query = query.filter(ActivityLog.date <= ensure_utc(end_date))

    return query.order_by(ActivityLog.date.desc()).limit(limit).all()


@router.get("/{log_id}", response_model=ActivityLogResponse)
def get_activity(
    log_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    return _get_owned_log(db, log_id, session)


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    log_id: UUID,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    _get_owned_log(db, log_id, session)
    DocumentStore(db, ActivityLog).delete(log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
