"""
Scoring engine.

Answers are scored one at a time as they are submitted; finalizing an
attempt is a fold over the stored, already-scored answers. Nothing here
touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from exam_api.errors import AnswerValidationError
from exam_api.models.attempts import FreeText, OptionChoice
from exam_api.models.db.test import Question, QuestionType

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class ScoredAnswer(Protocol):
    answer: str | None
    is_correct: bool | None
    marks_obtained: Decimal


@dataclass(frozen=True)
class AnswerScore:
    is_correct: bool | None  # None = not auto-gradable
    marks_obtained: Decimal


@dataclass(frozen=True)
class AttemptAggregate:
    score: Decimal
    correct_answers: int
    incorrect_answers: int
    unanswered: int
    percentage: Decimal


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def penalty_for(marks: int, negative_marking: Decimal | None) -> Decimal:
    """Marks deducted for a wrong answer (zero or negative)."""
    fraction = Decimal(negative_marking or 0)
    if fraction <= 0:
        return _quantize(ZERO)
    return _quantize(-(fraction * Decimal(marks)))


def parse_answer(
    question: Question, submission: OptionChoice | FreeText | None
) -> str | None:
    """
    Convert a tagged answer into the stored string form.

    Single-choice questions take an option choice (stored as the option id);
    fill-blank and free-text questions take text. A missing answer or an
    empty text is stored as None, meaning "unanswered".
    """
    if submission is None:
        return None

    kind = question.kind
    if kind is QuestionType.SINGLE_CHOICE:
        if not isinstance(submission, OptionChoice):
            raise AnswerValidationError("Single-choice questions expect an option choice")
        if submission.option_id not in {option.id for option in question.options}:
            raise AnswerValidationError("Option does not belong to this question")
        return str(submission.option_id)

    if not isinstance(submission, FreeText):
        raise AnswerValidationError(f"Questions of type '{kind.value}' expect a text answer")
    return submission.text or None


def score_answer(
    question: Question,
    answer: str | None,
    negative_marking: Decimal | None = None,
) -> AnswerScore:
    """Score one answer against the question bank."""
    if not answer:
        # Unanswered: never penalised
        return AnswerScore(is_correct=False, marks_obtained=_quantize(ZERO))

    kind = question.kind
    if kind is QuestionType.FREE_TEXT:
        return AnswerScore(is_correct=None, marks_obtained=_quantize(ZERO))

    if kind is QuestionType.SINGLE_CHOICE:
        accepted = {str(option.id) for option in question.options if option.is_correct}
    else:
        # Fill-blank: exact, case-sensitive match against any accepted text
        accepted = {option.option_text for option in question.options if option.is_correct}

    if answer in accepted:
        return AnswerScore(is_correct=True, marks_obtained=_quantize(Decimal(question.marks)))
    return AnswerScore(
        is_correct=False,
        marks_obtained=penalty_for(question.marks, negative_marking),
    )


def aggregate(
    answers: Iterable[ScoredAnswer],
    total_questions: int,
    total_marks: int,
) -> AttemptAggregate:
    """Fold scored answers into attempt totals. Deterministic for a given answer set."""
    score = ZERO
    correct = 0
    incorrect = 0

    for answer in answers:
        score += Decimal(answer.marks_obtained or 0)
        if answer.is_correct is True:
            correct += 1
        elif answer.is_correct is False and answer.answer:
            incorrect += 1

    unanswered = max(0, total_questions - correct - incorrect)

    if total_marks > 0:
        percentage = max(ZERO, score * HUNDRED / Decimal(total_marks))
    else:
        percentage = ZERO

    return AttemptAggregate(
        score=_quantize(score),
        correct_answers=correct,
        incorrect_answers=incorrect,
        unanswered=unanswered,
        percentage=_quantize(percentage),
    )
