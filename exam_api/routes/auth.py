"""Registration, login and session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session as DbSession

from exam_api.config import ACCESS_TOKEN_EXPIRE_MINUTES
from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.errors import UnauthenticatedError
from exam_api.models.auth import (
    MessageResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from exam_api.models.db.user import User
from exam_api.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: UserRegister,
    db: Annotated[DbSession, Depends(get_db)],
) -> UserResponse:
    """Create a student account."""
    if auth_service.get_user_by_username(db, data.username):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Username already registered")
    if auth_service.get_user_by_email(db, data.email):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = auth_service.create_user(
        db,
        data.username,
        data.email,
        data.password,
        full_name=data.full_name,
        phone=data.phone,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    data: UserLogin,
    db: Annotated[DbSession, Depends(get_db)],
) -> TokenResponse:
    """Exchange username (or email) and password for a bearer token."""
    user = auth_service.authenticate(db, data.username, data.password)
    if user is None:
        raise UnauthenticatedError("Invalid credentials")
    if not user.is_active:
        raise UnauthenticatedError("User is inactive")

    token = auth_service.issue_token(db, user)
    return TokenResponse(
        access_token=token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    """Revoke the session behind the presented token."""
    claims = auth_service.decode_token(credentials.credentials) if credentials else None
    if claims and claims.get("jti") and auth_service.revoke_session(db, claims["jti"]):
        return MessageResponse(message="Logged out successfully")
    return MessageResponse(message="Already logged out")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)
