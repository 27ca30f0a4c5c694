"""
Profile API Endpoints

One profile per user, keyed by user id. Created during onboarding (or
directly via POST), edited with PATCH. BMI is derived on read, never stored.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
import logging

from core.database import get_db
from core.document_store import DocumentStore
from core.exceptions import ConflictError, ONBOARDING_REDIRECT
from core.session import UserSession, get_user_session
from models import Profile
from schemas import Difficulty, ProfileCreate, ProfileResponse, ProfileUpdate
from services.bmi_calculator import calculate_bmi, get_bmi_category
from services.onboarding import validate_profile_for_workout
from services.workout_generator import determine_fitness_level

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/profile", tags=["profile"])


class ProfileReadinessResponse(BaseModel):
    is_valid: bool
    missing_fields: List[str]
    errors: List[str]
    fitness_level: Optional[Difficulty] = None
    redirect: Optional[str] = None


def profile_to_response(profile: Profile) -> ProfileResponse:
    response = ProfileResponse.model_validate(profile)
    if profile.weight_kg and profile.height_cm:
        response.bmi = calculate_bmi(profile.weight_kg, profile.height_cm)
        response.bmi_category = get_bmi_category(response.bmi)
    return response


def save_profile(db: Session, session: UserSession, data: ProfileCreate) -> Profile:
    """Create or replace the user's profile."""
    store = DocumentStore(db, Profile, key="user_id")
    profile = store.put(session.user_id, data.model_dump(mode="json"))
    logger.info(
        "Profile saved",
        extra={"extra_fields": {"user_id": str(session.user_id), "goal": profile.fitness_goal}},
    )
    return profile


@router.get("", response_model=ProfileResponse)
def get_profile(session: UserSession = Depends(get_user_session)):
    """Current profile. 404 with an onboarding redirect if none exists yet."""
    return profile_to_response(session.require_profile())


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def create_profile(
    profile_data: ProfileCreate,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    if session.has_profile:
        raise ConflictError("Profile already exists; use PATCH to edit it")
    return profile_to_response(save_profile(db, session, profile_data))


@router.patch("", response_model=ProfileResponse)
def update_profile(
    profile_update: ProfileUpdate,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """Partial edit. Only fields present in the request body change."""
    session.require_profile()
    patch = profile_update.model_dump(mode="json", exclude_unset=True)
    profile = DocumentStore(db, Profile, key="user_id").update(session.user_id, patch)
    return profile_to_response(profile)


@router.get("/readiness", response_model=ProfileReadinessResponse)
def get_profile_readiness(session: UserSession = Depends(get_user_session)):
    """Whether the profile can drive workout plan generation, and why not."""
    validation = validate_profile_for_workout(session.profile)
    if not validation.is_valid:
        return ProfileReadinessResponse(
            is_valid=False,
            missing_fields=validation.missing_fields,
            errors=validation.errors,
            redirect=ONBOARDING_REDIRECT,
        )
    return ProfileReadinessResponse(
        is_valid=True,
        missing_fields=[],
        errors=[],
        fitness_level=determine_fitness_level(session.profile),
    )
