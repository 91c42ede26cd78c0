"""Authentication dependencies for FastAPI."""
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.errors import UnauthenticatedError
from exam_api.models.db.user import User
from exam_api.services.auth_service import (
    decode_token,
    get_active_session,
    get_user_by_id,
    touch_session,
)

# HTTP Bearer scheme for JWT
security = HTTPBearer(auto_error=False)


def _resolve_user(db: DbSession, token: str) -> tuple[User | None, str]:
    """Resolve a bearer token to an active user, or explain why not."""
    payload = decode_token(token)
    if payload is None:
        return None, "Invalid or expired token"

    # Check if session is still active
    jti = payload.get("jti")
    if jti:
        session = get_active_session(db, jti)
        if session is None:
            return None, "Session expired or invalidated"
        # Extend session on activity
        touch_session(db, session)

    user_id = payload.get("sub")
    if user_id is None:
        return None, "Invalid token payload"

    user = get_user_by_id(db, int(user_id))
    if user is None:
        return None, "User not found"
    if not user.is_active:
        return None, "User is inactive"
    return user, ""


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user.

    Raises:
        UnauthenticatedError: 401 if not authenticated or token is invalid.
    """
    if credentials is None:
        raise UnauthenticatedError()

    user, reason = _resolve_user(db, credentials.credentials)
    if user is None:
        raise UnauthenticatedError(reason)
    return user


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> User | None:
    """Get the current user if authenticated, otherwise None.

    This dependency does not raise an exception if not authenticated.
    """
    if credentials is None:
        return None

    user, _ = _resolve_user(db, credentials.credentials)
    return user
