"""
Onboarding router.

Clients walk the user through personal info, health data and fitness goals,
then submit all three steps at once. Completing onboarding creates (or
replaces) the profile.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.session import UserSession, get_user_session
from routers.profile import profile_to_response, save_profile
from schemas import OnboardingSubmission, ProfileResponse
from services.onboarding import ONBOARDING_STEPS, merge_onboarding_steps

router = APIRouter(prefix="/v1/onboarding", tags=["onboarding"])


@router.get("/steps")
def get_onboarding_steps(session: UserSession = Depends(get_user_session)):
    """Ordered step list and whether this user has already finished."""
    return {
        "steps": ONBOARDING_STEPS,
        "completed": session.has_profile,
    }


@router.post("/complete", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def complete_onboarding(
    submission: OnboardingSubmission,
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    profile_data = merge_onboarding_steps(submission.personal, submission.health, submission.goals)
    return profile_to_response(save_profile(db, session, profile_data))
