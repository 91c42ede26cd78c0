"""Attempt endpoints: answering, completing, status and report."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.models import (
    AnswerSubmission,
    AttemptReportResponse,
    AttemptStatusResponse,
    TestAttemptEnvelope,
    TestAttemptResponse,
    UserAnswerResponse,
)
from exam_api.models.db.user import User
from exam_api.services import attempt_service

router = APIRouter(prefix="/api/test-attempts/{attempt_id}", tags=["attempts"])


@router.post("/submit-answer", response_model=UserAnswerResponse)
def submit_answer(
    attempt_id: int,
    payload: AnswerSubmission,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> UserAnswerResponse:
    """Record (or replace) the answer to one question."""
    user_answer = attempt_service.submit_answer(db, current_user, attempt_id, payload)
    return UserAnswerResponse.model_validate(user_answer)


@router.post("/complete", response_model=TestAttemptEnvelope)
def complete_attempt(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> TestAttemptEnvelope:
    """Finalize the attempt. Safe to call more than once."""
    attempt = attempt_service.complete_attempt(db, current_user, attempt_id)
    return TestAttemptEnvelope(test_attempt=TestAttemptResponse.model_validate(attempt))


@router.get("/status", response_model=AttemptStatusResponse)
def get_attempt_status(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> AttemptStatusResponse:
    """Remaining time according to the server clock."""
    return attempt_service.get_attempt_status(db, current_user, attempt_id)


@router.get("", response_model=AttemptReportResponse)
def get_attempt_report(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> AttemptReportResponse:
    """Attempt report with every question and the user's answers."""
    return attempt_service.get_attempt_report(db, current_user, attempt_id)
