"""
Authentication API endpoints.

Provides:
- User registration
- Login (JWT token generation)
- Current account lookup and deletion
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional
from uuid import UUID
from datetime import datetime
import logging

from core.database import get_db
from core.document_store import DocumentStore
from core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    hash_password,
    password_problem,
    verify_password,
)
from core.session import UserSession, get_user_session
from models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class UserRegister(BaseModel):
    """Schema for user registration."""
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Schema for user response."""
    id: UUID
    email: str
    display_name: Optional[str] = None
    role: str
    created_at: datetime
    onboarding_completed: bool = False
    ui_theme: str = "light"

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Schema for token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = ACCESS_TOKEN_EXPIRE_MINUTES * 60  # seconds
    user: Optional[UserResponse] = None


def _token_for(user: User) -> TokenResponse:
    access_token = create_access_token(user.id, claims={"email": user.email, "role": user.role})
    return TokenResponse(
        access_token=access_token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """
    Register a new user account.

    A token is issued immediately so the client can go straight to onboarding.
    """
    email = user_data.email.strip().lower()

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    problem = password_problem(user_data.password)
    if problem:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=problem
        )

    user = DocumentStore(db, User).put(None, {
        "email": email,
        "password_hash": hash_password(user_data.password),
        "display_name": user_data.display_name or email.split("@")[0],
        "role": "user",
    })

    logger.info("User registered", extra={"extra_fields": {"user_id": str(user.id)}})
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate user and return JWT token."""
    email = credentials.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login attempt", extra={"extra_fields": {"email": email}})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _token_for(user)


@router.get("/me", response_model=UserResponse)
def get_me(session: UserSession = Depends(get_user_session)):
    """Current account, with onboarding state and UI preferences."""
    response = UserResponse.model_validate(session.user)
    response.onboarding_completed = session.has_profile
    response.ui_theme = session.ui_theme
    return response


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    session: UserSession = Depends(get_user_session),
    db: Session = Depends(get_db)
):
    """
    Delete the account and everything it owns.

    Profile, plans and activity logs go with it (ON DELETE CASCADE).
    """
    user_id = session.user_id
    DocumentStore(db, User).delete(user_id)
    logger.info("User account deleted", extra={"extra_fields": {"user_id": str(user_id)}})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
