"""Service layer for reading tests, questions and test series."""
from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession, selectinload

from exam_api.errors import NotFoundError
from exam_api.models.db.test import Question, Test, TestSeries


def get_test(db: DBSession, test_id: int) -> Test:
    """Get test by ID with its questions loaded."""
    test = db.execute(
        select(Test)
        .options(selectinload(Test.questions).selectinload(Question.options))
        .where(Test.id == test_id)
    ).scalar_one_or_none()
    if test is None:
        raise NotFoundError("Test not found")
    return test


def get_active_test(db: DBSession, test_id: int) -> Test:
    """Get a test that can be attempted."""
    test = get_test(db, test_id)
    if not test.is_active:
        raise NotFoundError("Test not found")
    return test


def list_test_questions(db: DBSession, test_id: int) -> list[Question]:
    """Get the ordered question set of a test."""
    return list(get_test(db, test_id).questions)


def get_question(db: DBSession, question_id: int) -> Question:
    """Get question with options and explanation."""
    question = db.execute(
        select(Question)
        .options(selectinload(Question.options), selectinload(Question.explanation))
        .where(Question.id == question_id)
    ).scalar_one_or_none()
    if question is None:
        raise NotFoundError("Question not found")
    return question


def list_test_series(db: DBSession, include_unpublished: bool = False) -> list[TestSeries]:
    """List test series, published ones only unless asked otherwise."""
    query = select(TestSeries).order_by(TestSeries.id)
    if not include_unpublished:
        query = query.where(TestSeries.is_published == True)  # noqa: E712
    return list(db.execute(query).scalars().all())


def get_test_series(
    db: DBSession, series_id: int, include_unpublished: bool = False
) -> TestSeries:
    """Get a test series with its tests."""
    series = db.execute(
        select(TestSeries)
        .options(selectinload(TestSeries.tests).selectinload(Test.questions))
        .where(TestSeries.id == series_id)
    ).scalar_one_or_none()
    if series is None or (not series.is_published and not include_unpublished):
        raise NotFoundError("Test series not found")
    return series
