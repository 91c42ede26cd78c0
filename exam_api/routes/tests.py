"""Test endpoints: details, question list, starting an attempt."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.models import QuestionResponse, TestAttemptEnvelope, TestAttemptResponse, TestResponse
from exam_api.models.db.user import User
from exam_api.serialization import serialize_test
from exam_api.services import attempt_service, test_service

router = APIRouter(prefix="/api/tests/{test_id}", tags=["tests"])


@router.get("", response_model=TestResponse)
def get_test(
    test_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> TestResponse:
    """Get test details."""
    return serialize_test(test_service.get_test(db, test_id))


@router.get("/questions", response_model=list[QuestionResponse])
def list_questions(
    test_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> list[QuestionResponse]:
    """List the questions of a test, without answers."""
    return [
        QuestionResponse.model_validate(question)
        for question in test_service.list_test_questions(db, test_id)
    ]


@router.post("/start", response_model=TestAttemptEnvelope)
def start_test(
    test_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> TestAttemptEnvelope:
    """Start a timed attempt, or resume the open one."""
    attempt = attempt_service.start_attempt(db, current_user, test_id)
    return TestAttemptEnvelope(test_attempt=TestAttemptResponse.model_validate(attempt))
