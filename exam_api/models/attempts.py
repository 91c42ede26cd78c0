"""Attempt-related Pydantic models."""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from exam_api.models.db.attempt import AttemptStatus
from exam_api.models.tests import OptionResponse


class OptionChoice(BaseModel):
    """Answer to a single-choice question."""

    kind: Literal["option"] = "option"
    option_id: int


class FreeText(BaseModel):
    """Typed answer to a fill-blank or free-text question."""

    kind: Literal["text"] = "text"
    text: str = Field(..., max_length=10_000)


AnswerValue = Annotated[Union[OptionChoice, FreeText], Field(discriminator="kind")]


class AnswerSubmission(BaseModel):
    """Model for submitting one answer. A null answer clears the question."""

    question_id: int
    answer: AnswerValue | None = None


class TestSummary(BaseModel):
    """Test fields a client needs while taking or reviewing an attempt."""

    id: int
    title: str
    description: str
    instructions: str | None
    duration: int
    total_marks: int
    passing_marks: int
    negative_marking: Decimal

    class Config:
        from_attributes = True


class TestAttemptResponse(BaseModel):
    """Attempt record with aggregates (null until completed)."""

    id: int
    test_id: int
    user_id: int
    status: AttemptStatus
    started_at: datetime
    ended_at: datetime | None
    deadline: datetime
    is_completed: bool
    total_marks: int
    score: Decimal | None
    time_taken: int | None
    correct_answers: int | None
    incorrect_answers: int | None
    unanswered: int | None
    percentage: Decimal | None
    passed: bool | None
    test: TestSummary

    class Config:
        from_attributes = True


class TestAttemptEnvelope(BaseModel):
    """Response of start/complete."""

    test_attempt: TestAttemptResponse


class UserAnswerResponse(BaseModel):
    """Stored, provisionally scored answer."""

    id: int
    test_attempt_id: int
    question_id: int
    answer: str | None
    is_correct: bool | None
    marks_obtained: Decimal
    answered_at: datetime

    class Config:
        from_attributes = True


class AttemptStatusResponse(BaseModel):
    """Server-authoritative timer state."""

    attempt_id: int
    status: AttemptStatus
    is_completed: bool
    deadline: datetime
    server_time: datetime
    remaining_seconds: int


class ReportQuestion(BaseModel):
    """Question as shown in an attempt report."""

    id: int
    question_text: str
    question_type: str
    marks: int
    image_url: str | None = None
    options: list[OptionResponse] = []
    explanation: str | None = None
    user_answer: UserAnswerResponse | None = None


class AttemptReportResponse(BaseModel):
    """Full attempt report."""

    test_attempt: TestAttemptResponse
    questions: list[ReportQuestion]
