"""Database models."""
from exam_api.models.db.user import User, Session, UserRole
from exam_api.models.db.test import (
    Explanation,
    Option,
    Question,
    QuestionType,
    Test,
    TestSeries,
)
from exam_api.models.db.attempt import AttemptStatus, TestAttempt, UserAnswer

__all__ = [
    "User",
    "Session",
    "UserRole",
    "Explanation",
    "Option",
    "Question",
    "QuestionType",
    "Test",
    "TestSeries",
    "AttemptStatus",
    "TestAttempt",
    "UserAnswer",
]
