"""
Test catalog and question bank models.

A TestSeries groups Tests; a Test owns an ordered set of Questions,
each with its Options and an optional Explanation. These tables are
written by the admin CMS and only read by the attempt engine.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from exam_api.database import Base


class QuestionType(str, enum.Enum):
    """Kind of question, which decides how an answer is scored."""

    SINGLE_CHOICE = "mcq"
    FILL_BLANK = "fill_blank"
    FREE_TEXT = "free_text"


class TestSeries(Base):
    """Named, purchasable collection of tests."""

    __tablename__ = "test_series"
    __test__ = False

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="General", nullable=False)
    price: Mapped[int] = mapped_column(default=0, nullable=False)
    features: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    is_published: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    tests: Mapped[list["Test"]] = relationship(
        "Test",
        back_populates="test_series",
        cascade="all, delete-orphan",
        order_by="Test.id",
    )


class Test(Base):
    """
    Timed test definition.
    negative_marking is a fraction of a question's marks deducted per wrong answer.
    """

    __tablename__ = "tests"
    __test__ = False  # not a pytest class

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    test_series_id: Mapped[int | None] = mapped_column(
        ForeignKey("test_series.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    duration: Mapped[int] = mapped_column(nullable=False)  # minutes
    total_marks: Mapped[int] = mapped_column(default=0, nullable=False)
    passing_marks: Mapped[int] = mapped_column(default=0, nullable=False)
    negative_marking: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=Decimal("0"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    test_series: Mapped["TestSeries | None"] = relationship(
        "TestSeries", back_populates="tests"
    )
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by=lambda: (Question.position, Question.id),
    )

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def question_marks_total(self) -> int:
        """Sum of the mark values of this test's questions."""
        return sum(question.marks for question in self.questions)


class Question(Base):
    """Question bank entry belonging to one test."""

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    test_id: Mapped[int] = mapped_column(
        ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(
        String(20), default=QuestionType.SINGLE_CHOICE.value, nullable=False
    )
    marks: Mapped[int] = mapped_column(default=1, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(default=0, nullable=False)  # Order within test

    # Relationships
    test: Mapped["Test"] = relationship("Test", back_populates="questions")
    options: Mapped[list["Option"]] = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Option.id",
    )
    explanation: Mapped["Explanation | None"] = relationship(
        "Explanation",
        back_populates="question",
        cascade="all, delete-orphan",
        uselist=False,
    )

    @property
    def kind(self) -> QuestionType:
        return QuestionType(self.question_type)


class Option(Base):
    """
    Answer option of a question.
    For fill-blank questions every option is an accepted literal answer.
    """

    __tablename__ = "options"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(default=False, nullable=False)

    question: Mapped["Question"] = relationship("Question", back_populates="options")


class Explanation(Base):
    """Worked solution shown in the report."""

    __tablename__ = "explanations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    explanation: Mapped[str] = mapped_column(Text, nullable=False)

    question: Mapped["Question"] = relationship("Question", back_populates="explanation")
