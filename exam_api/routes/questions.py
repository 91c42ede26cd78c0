"""Question endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_optional_user
from exam_api.models import QuestionDetailResponse
from exam_api.models.db.user import User
from exam_api.serialization import serialize_question_detail
from exam_api.services.test_service import get_question

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("/{question_id}", response_model=QuestionDetailResponse)
def get_question_detail(
    question_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> QuestionDetailResponse:
    """Get a question with its options; answer keys are shown to admins only."""
    question = get_question(db, question_id)
    reveal_answers = current_user is not None and current_user.is_admin
    return serialize_question_detail(question, reveal_answers)
