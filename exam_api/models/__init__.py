"""Pydantic models."""
from exam_api.models.attempts import (
    AnswerSubmission,
    AttemptReportResponse,
    AttemptStatusResponse,
    FreeText,
    OptionChoice,
    ReportQuestion,
    TestAttemptEnvelope,
    TestAttemptResponse,
    UserAnswerResponse,
)
from exam_api.models.auth import (
    MessageResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from exam_api.models.tests import (
    OptionResponse,
    QuestionDetailResponse,
    QuestionResponse,
    TestResponse,
    TestSeriesDetailResponse,
    TestSeriesResponse,
)

__all__ = [
    "AnswerSubmission",
    "AttemptReportResponse",
    "AttemptStatusResponse",
    "FreeText",
    "OptionChoice",
    "ReportQuestion",
    "TestAttemptEnvelope",
    "TestAttemptResponse",
    "UserAnswerResponse",
    "MessageResponse",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "OptionResponse",
    "QuestionDetailResponse",
    "QuestionResponse",
    "TestResponse",
    "TestSeriesDetailResponse",
    "TestSeriesResponse",
]
