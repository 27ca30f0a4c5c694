"""
Bearer-token authentication dependency.

Every failure is a 401 with a WWW-Authenticate challenge; clients respond
by sending the user to the login screen.
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core.exceptions import UnauthorizedError
from core.security import decode_access_token
from models import User

# auto_error=False so a missing header is our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def _user_id_from_claims(claims: dict) -> UUID:
    subject = claims.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token payload")
    try:
        return UUID(subject)
    except ValueError:
        raise UnauthorizedError("Invalid user ID format")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """The account named by the bearer token. Deleted accounts fail like bad tokens."""
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise UnauthorizedError("Invalid authentication credentials")

    user = db.get(User, _user_id_from_claims(claims))
    if user is None:
        raise UnauthorizedError("User not found")
    return user
