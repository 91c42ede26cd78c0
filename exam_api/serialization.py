"""
Response builders that decide how much of the question bank a caller sees.

Option correctness and explanations are answer keys: they are only
included when `reveal_answers` is set (admins, or the owner of a completed
attempt). Fill-blank options *are* the accepted answers, so they are
dropped entirely when hidden.
"""
from __future__ import annotations

from exam_api.models.attempts import ReportQuestion, UserAnswerResponse
from exam_api.models.db.attempt import UserAnswer
from exam_api.models.db.test import Question, QuestionType, Test, TestSeries
from exam_api.models.tests import (
    OptionResponse,
    QuestionDetailResponse,
    TestResponse,
    TestSeriesDetailResponse,
)


def serialize_options(question: Question, reveal_answers: bool) -> list[OptionResponse]:
    if not reveal_answers and question.kind is not QuestionType.SINGLE_CHOICE:
        return []
    return [
        OptionResponse(
            id=option.id,
            option_text=option.option_text,
            is_correct=option.is_correct if reveal_answers else None,
        )
        for option in question.options
    ]


def _explanation_text(question: Question, reveal_answers: bool) -> str | None:
    if not reveal_answers or question.explanation is None:
        return None
    return question.explanation.explanation


def serialize_question_detail(
    question: Question, reveal_answers: bool
) -> QuestionDetailResponse:
    return QuestionDetailResponse(
        id=question.id,
        test_id=question.test_id,
        question_text=question.question_text,
        question_type=question.question_type,
        marks=question.marks,
        image_url=question.image_url,
        position=question.position,
        options=serialize_options(question, reveal_answers),
        explanation=_explanation_text(question, reveal_answers),
    )


def serialize_report_question(
    question: Question,
    user_answer: UserAnswer | None,
    reveal_answers: bool,
) -> ReportQuestion:
    return ReportQuestion(
        id=question.id,
        question_text=question.question_text,
        question_type=question.question_type,
        marks=question.marks,
        image_url=question.image_url,
        options=serialize_options(question, reveal_answers),
        explanation=_explanation_text(question, reveal_answers),
        user_answer=(
            UserAnswerResponse.model_validate(user_answer) if user_answer else None
        ),
    )


def serialize_test(test: Test) -> TestResponse:
    return TestResponse.model_validate(test)


def serialize_test_series_detail(series: TestSeries) -> TestSeriesDetailResponse:
    return TestSeriesDetailResponse(
        id=series.id,
        title=series.title,
        description=series.description,
        category=series.category,
        price=series.price,
        features=list(series.features or []),
        is_published=series.is_published,
        tests=[serialize_test(test) for test in series.tests if test.is_active],
    )
