"""
Per-request user session.

Bundles the authenticated user, their profile (if onboarding is done) and
UI configuration into one value that routers receive explicitly.
"""
from dataclasses import dataclass
from typing import Optional, List
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.config import settings
from core.database import get_db
from core.document_store import DocumentStore
from core.exceptions import ProfileRequiredError
from models import User, Profile


@dataclass(frozen=True)
class UserSession:
    user: User
    profile: Optional[Profile]
    ui_theme: str = "light"

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def has_profile(self) -> bool:
        return self.profile is not None

    def require_profile(self, missing_fields: Optional[List[str]] = None) -> Profile:
        """Return the profile or send the client back to onboarding."""
        if self.profile is None:
            raise ProfileRequiredError("Complete onboarding to create your profile")
        if missing_fields:
            raise ProfileRequiredError("Profile is incomplete", missing_fields=missing_fields)
        return self.profile


def get_user_session(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> UserSession:
    profile = DocumentStore(db, Profile, key="user_id").get(current_user.id)
    return UserSession(user=current_user, profile=profile, ui_theme=settings.UI_THEME)
