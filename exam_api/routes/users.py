"""Per-user routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.models import TestAttemptResponse
from exam_api.models.db.user import User
from exam_api.services.attempt_service import list_user_attempts

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/test-attempts", response_model=list[TestAttemptResponse])
def list_my_attempts(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    test_id: int | None = None,
    completed: bool | None = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[TestAttemptResponse]:
    """List the current user's attempts, newest first."""
    attempts = list_user_attempts(
        db,
        current_user,
        test_id=test_id,
        completed=completed,
        limit=limit,
        offset=offset,
    )
    return [TestAttemptResponse.model_validate(attempt) for attempt in attempts]
