"""
TestAttempt and UserAnswer database models for timed test sessions.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from exam_api.database import Base
from exam_api.utils.time_utils import as_utc

if TYPE_CHECKING:
    from exam_api.models.db.test import Question, Test
    from exam_api.models.db.user import User


class AttemptStatus(str, enum.Enum):
    """Derived state of a test attempt."""

    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TestAttempt(Base):
    """
    One user's timed run through a test.
    Aggregate columns stay NULL until the attempt is finalized.
    """

    __tablename__ = "test_attempts"
    __test__ = False  # not a pytest class

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # References
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    test_id: Mapped[int] = mapped_column(
        ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Timing
    started_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    time_taken: Mapped[int | None] = mapped_column(nullable=True)  # seconds

    # Status and results
    is_completed: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    total_marks: Mapped[int] = mapped_column(default=0, nullable=False)
    score: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    correct_answers: Mapped[int | None] = mapped_column(nullable=True)
    incorrect_answers: Mapped[int | None] = mapped_column(nullable=True)
    unanswered: Mapped[int | None] = mapped_column(nullable=True)
    percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="test_attempts")
    test: Mapped["Test"] = relationship("Test")
    answers: Mapped[list["UserAnswer"]] = relationship(
        "UserAnswer", back_populates="test_attempt", cascade="all, delete-orphan"
    )

    @property
    def status(self) -> AttemptStatus:
        if self.is_completed:
            return AttemptStatus.COMPLETED
        if self.answers:
            return AttemptStatus.IN_PROGRESS
        return AttemptStatus.CREATED

    @property
    def deadline(self) -> datetime:
        """Moment the attempt stops accepting answers."""
        return as_utc(self.started_at) + timedelta(minutes=self.test.duration)

    @property
    def passed(self) -> bool | None:
        """Pass/fail once scored."""
        if not self.is_completed or self.score is None:
            return None
        return self.score >= self.test.passing_marks


class UserAnswer(Base):
    """
    Scored response to a single question within an attempt.
    One row per (attempt, question); resubmitting overwrites it.
    """

    __tablename__ = "user_answers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    test_attempt_id: Mapped[int] = mapped_column(
        ForeignKey("test_attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )

    # Option id as string, free text, or NULL when left blank
    answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_correct: Mapped[bool | None] = mapped_column(nullable=True)  # NULL = ungraded
    marks_obtained: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    answered_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("test_attempt_id", "question_id", name="uq_attempt_question"),
    )

    # Relationships
    test_attempt: Mapped["TestAttempt"] = relationship(
        "TestAttempt", back_populates="answers"
    )
    question: Mapped["Question"] = relationship("Question")
