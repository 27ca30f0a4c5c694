from sqlalchemy import Column, Integer, Boolean, Float, DateTime, ForeignKey, Text, Index, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
import uuid

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    """
    An account. Owns exactly one profile and any number of plans and logs.

    Deleting the user removes everything it owns (ON DELETE CASCADE).
    """
    __tablename__ = "app_user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    display_name = Column(Text, nullable=True)
    role = Column(Text, default="user", nullable=False)  # 'user', 'admin'


class Profile(Base):
    """
    Health and fitness intake data driving plan personalization.

    Created once at onboarding, edited afterwards, never deleted on its own.
    """
    __tablename__ = "profile"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True)
    age = Column(Integer, nullable=True)
    height_cm = Column(Float, nullable=True)
    weight_kg = Column(Float, nullable=True)
    health_conditions = Column(JSONType, nullable=False, default=list)  # ["none"] or condition tags
    dietary_preference = Column(Text, nullable=True)
    fitness_goal = Column(Text, nullable=True)
    target_weight_kg = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class WorkoutPlan(Base):
    """
    A generated or custom multi-week schedule of daily workouts.

    Days are stored inline as a JSON list; each day holds its workout sets.
    Only one plan per user is expected to be 'active' at a time (the routers
    cancel older active plans when a new one is stored).
    """
    __tablename__ = "workout_plan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)

    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Text, default="active", nullable=False)  # 'active', 'completed', 'cancelled'
    fitness_level = Column(Text, nullable=True)  # 'beginner', 'intermediate', 'advanced'

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    total_weeks = Column(Integer, nullable=False)
    generated_at = Column(DateTime(timezone=True), nullable=False)

    # Format: [{"day_number": 1, "day_of_week": "monday", "title": ..., "exercises": [...]}, ...]
    daily_workouts = Column(JSONType, nullable=False, default=list)

    notes = Column(Text, nullable=True)
    is_custom = Column(Boolean, default=False, nullable=False)
    customized_from = Column(Uuid(as_uuid=True), nullable=True)  # Source plan when cloned

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_workout_plan_user_id", "user_id"),
        Index("ix_workout_plan_user_status", "user_id", "status"),
    )


class ActivityLog(Base):
    """
    Record of a completed activity. Written once, never updated.
    """
    __tablename__ = "activity_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    type = Column(Text, nullable=False)  # 'workout', 'cardio', 'strength', 'flexibility', 'sports', 'other'
    duration_minutes = Column(Float, nullable=False)
    calories_burned = Column(Float, nullable=True)

    # Link back to the plan day this log completes (if any)
    workout_plan_id = Column(Uuid(as_uuid=True), ForeignKey("workout_plan.id", ondelete="SET NULL"), nullable=True)
    day_number = Column(Integer, nullable=True)
    exercises_completed = Column(JSONType, nullable=False, default=list)

    notes = Column(Text, nullable=True)
    weight_kg = Column(Float, nullable=True)  # Weight at time of activity
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_activity_log_user_date", "user_id", "date"),
        Index("ix_activity_log_plan_id", "workout_plan_id"),
    )
