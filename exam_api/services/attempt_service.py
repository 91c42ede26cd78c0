"""Service layer for timed test attempts."""
import logging
import math
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession, selectinload

from exam_api.errors import ConflictError, ForbiddenError, NotFoundError
from exam_api.models.attempts import (
    AnswerSubmission,
    AttemptReportResponse,
    AttemptStatusResponse,
    TestAttemptResponse,
)
from exam_api.models.db.attempt import TestAttempt, UserAnswer
from exam_api.models.db.test import Question, Test
from exam_api.models.db.user import User
from exam_api.serialization import serialize_report_question
from exam_api.services.scoring_service import AnswerScore, aggregate, parse_answer, score_answer
from exam_api.services.test_service import get_active_test, get_question
from exam_api.utils.time_utils import as_utc, elapsed_seconds, utc_now

logger = logging.getLogger(__name__)


def is_expired(attempt: TestAttempt, now: datetime | None = None) -> bool:
    """Whether the server clock has reached the attempt's deadline."""
    now = as_utc(now or utc_now())
    return now >= attempt.deadline


def remaining_seconds(attempt: TestAttempt, now: datetime | None = None) -> int:
    """Seconds left before the deadline (0 once expired or completed)."""
    if attempt.is_completed:
        return 0
    now = as_utc(now or utc_now())
    remaining = (attempt.deadline - now).total_seconds()
    return max(0, math.floor(remaining))


def _load_attempt(db: DBSession, attempt_id: int) -> TestAttempt:
    attempt = db.execute(
        select(TestAttempt)
        .options(
            selectinload(TestAttempt.test)
            .selectinload(Test.questions)
            .selectinload(Question.options)
        )
        .where(TestAttempt.id == attempt_id)
    ).scalar_one_or_none()
    if attempt is None:
        raise NotFoundError("Test attempt not found")
    return attempt


def get_owned_attempt(db: DBSession, user: User, attempt_id: int) -> TestAttempt:
    """Get attempt by ID, ensuring it belongs to the user."""
    attempt = _load_attempt(db, attempt_id)
    if attempt.user_id != user.id:
        raise ForbiddenError("This attempt belongs to another user")
    return attempt


def _find_open_attempt(db: DBSession, user_id: int, test_id: int) -> TestAttempt | None:
    return db.execute(
        select(TestAttempt)
        .where(
            TestAttempt.user_id == user_id,
            TestAttempt.test_id == test_id,
            TestAttempt.is_completed == False,  # noqa: E712
        )
        .order_by(TestAttempt.started_at.desc(), TestAttempt.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def start_attempt(
    db: DBSession,
    user: User,
    test_id: int,
    now: datetime | None = None,
) -> TestAttempt:
    """
    Start a test or resume the user's open attempt.

    An open attempt whose deadline already passed is finalized first and a
    fresh attempt is created in its place.
    """
    now = as_utc(now or utc_now())
    test = get_active_test(db, test_id)

    attempt = _find_open_attempt(db, user.id, test.id)
    if attempt is not None:
        if not is_expired(attempt, now):
            logger.info(f"Resuming attempt {attempt.id} for user {user.id} on test {test.id}")
            return attempt
        finalize_attempt(db, attempt, now=now)

    attempt = TestAttempt(
        user_id=user.id,
        test_id=test.id,
        started_at=now,
        total_marks=test.total_marks or test.question_marks_total,
        is_completed=False,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info(f"Started attempt {attempt.id} for user {user.id} on test {test.id}")
    return attempt


def enforce_deadline(
    db: DBSession, attempt: TestAttempt, now: datetime | None = None
) -> TestAttempt:
    """Finalize the attempt if its time is up; otherwise return it untouched."""
    if attempt.is_completed or not is_expired(attempt, now):
        return attempt
    logger.info(f"Attempt {attempt.id} ran out of time, finalizing")
    return finalize_attempt(db, attempt, now=now)


def _upsert_answer(
    db: DBSession,
    attempt_id: int,
    question_id: int,
    answer: str | None,
    result: AnswerScore,
    now: datetime,
) -> UserAnswer:
    """
    Insert or overwrite the single answer row for (attempt, question).

    The attempt row is re-read under FOR UPDATE (a no-op on SQLite) in the
    same transaction, so an answer never lands on an attempt that a
    concurrent finalize has already completed.
    """

    def _lock_open_attempt() -> None:
        is_completed = db.execute(
            select(TestAttempt.is_completed)
            .where(TestAttempt.id == attempt_id)
            .with_for_update()
        ).scalar_one()
        if is_completed:
            db.rollback()
            raise ConflictError("Attempt already completed")

    def _existing() -> UserAnswer | None:
        return db.execute(
            select(UserAnswer).where(
                UserAnswer.test_attempt_id == attempt_id,
                UserAnswer.question_id == question_id,
            )
        ).scalar_one_or_none()

    def _apply(row: UserAnswer) -> None:
        row.answer = answer
        row.is_correct = result.is_correct
        row.marks_obtained = result.marks_obtained
        row.answered_at = now

    _lock_open_attempt()
    user_answer = _existing()
    if user_answer is None:
        user_answer = UserAnswer(test_attempt_id=attempt_id, question_id=question_id)
        db.add(user_answer)
    _apply(user_answer)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the row first; last write wins
        db.rollback()
        _lock_open_attempt()
        user_answer = _existing()
        if user_answer is None:
            raise
        _apply(user_answer)
        db.commit()

    db.refresh(user_answer)
    return user_answer


def submit_answer(
    db: DBSession,
    user: User,
    attempt_id: int,
    submission: AnswerSubmission,
    now: datetime | None = None,
) -> UserAnswer:
    """
    Record one answer, scoring it immediately.

    Raises:
        NotFoundError: unknown attempt, or question not part of the attempt's test.
        ForbiddenError: attempt belongs to another user.
        ConflictError: attempt already completed, or its deadline has passed
            (in which case it is finalized before rejecting).
        AnswerValidationError: answer variant does not fit the question type.
    """
    now = as_utc(now or utc_now())
    attempt = get_owned_attempt(db, user, attempt_id)

    if attempt.is_completed:
        raise ConflictError("Attempt already completed")

    if is_expired(attempt, now):
        enforce_deadline(db, attempt, now=now)
        raise ConflictError("Time is up; the attempt has been submitted")

    question = get_question(db, submission.question_id)
    if question.test_id != attempt.test_id:
        raise NotFoundError("Question not found in this test")

    answer = parse_answer(question, submission.answer)
    result = score_answer(question, answer, attempt.test.negative_marking)

    user_answer = _upsert_answer(db, attempt.id, question.id, answer, result, now)
    logger.debug(
        f"Attempt {attempt.id} question {question.id}: "
        f"correct={result.is_correct} marks={result.marks_obtained}"
    )
    return user_answer


def finalize_attempt(
    db: DBSession, attempt: TestAttempt, now: datetime | None = None
) -> TestAttempt:
    """
    Aggregate stored answers into the attempt and mark it completed.

    The end time is clipped to the deadline. The write is a conditional
    UPDATE on is_completed = false, so when two callers race only one
    aggregation lands and the other reads back the finalized row. The
    attempt row is locked before answers are read, so an in-flight upsert
    either commits first and is counted, or sees the completed flag.
    """
    now = as_utc(now or utc_now())
    ended_at = min(now, attempt.deadline)
    question_ids = {question.id for question in attempt.test.questions}

    db.execute(
        select(TestAttempt.id).where(TestAttempt.id == attempt.id).with_for_update()
    )
    answers = [
        answer
        for answer in db.execute(
            select(UserAnswer).where(UserAnswer.test_attempt_id == attempt.id)
        ).scalars().all()
        if answer.question_id in question_ids
    ]
    totals = aggregate(answers, len(question_ids), attempt.total_marks)

    result = db.execute(
        update(TestAttempt)
        .where(
            TestAttempt.id == attempt.id,
            TestAttempt.is_completed == False,  # noqa: E712
        )
        .values(
            is_completed=True,
            ended_at=ended_at,
            time_taken=elapsed_seconds(attempt.started_at, ended_at),
            score=totals.score,
            correct_answers=totals.correct_answers,
            incorrect_answers=totals.incorrect_answers,
            unanswered=totals.unanswered,
            percentage=totals.percentage,
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()

    if result.rowcount:
        logger.info(
            f"Completed attempt {attempt.id}: score={totals.score}/{attempt.total_marks} "
            f"correct={totals.correct_answers} incorrect={totals.incorrect_answers} "
            f"unanswered={totals.unanswered}"
        )
    else:
        logger.debug(f"Attempt {attempt.id} was already finalized by another request")

    db.refresh(attempt)
    return attempt


def complete_attempt(
    db: DBSession,
    user: User,
    attempt_id: int,
    now: datetime | None = None,
) -> TestAttempt:
    """Finalize an attempt. Completing an already completed attempt is a no-op."""
    attempt = get_owned_attempt(db, user, attempt_id)
    if attempt.is_completed:
        return attempt
    return finalize_attempt(db, attempt, now=now)


def get_attempt_status(
    db: DBSession,
    user: User,
    attempt_id: int,
    now: datetime | None = None,
) -> AttemptStatusResponse:
    """Server-side timer check; finalizes the attempt when time is up."""
    now = as_utc(now or utc_now())
    attempt = enforce_deadline(db, get_owned_attempt(db, user, attempt_id), now=now)
    return AttemptStatusResponse(
        attempt_id=attempt.id,
        status=attempt.status,
        is_completed=attempt.is_completed,
        deadline=attempt.deadline,
        server_time=now,
        remaining_seconds=remaining_seconds(attempt, now),
    )


def get_attempt_answers(db: DBSession, attempt_id: int) -> list[UserAnswer]:
    """Get all answers for an attempt, ordered by question."""
    return list(
        db.execute(
            select(UserAnswer)
            .where(UserAnswer.test_attempt_id == attempt_id)
            .order_by(UserAnswer.question_id)
        ).scalars().all()
    )


def get_attempt_report(
    db: DBSession,
    user: User,
    attempt_id: int,
    now: datetime | None = None,
) -> AttemptReportResponse:
    """
    Build the report of an attempt: the attempt record plus every question
    of the test with the user's answer. Answer keys and explanations are
    included only once the attempt is completed.
    """
    attempt = enforce_deadline(db, get_owned_attempt(db, user, attempt_id), now=now)
    answers = {answer.question_id: answer for answer in get_attempt_answers(db, attempt.id)}
    reveal_answers = attempt.is_completed or user.is_admin

    return AttemptReportResponse(
        test_attempt=TestAttemptResponse.model_validate(attempt),
        questions=[
            serialize_report_question(question, answers.get(question.id), reveal_answers)
            for question in attempt.test.questions
        ],
    )


def list_user_attempts(
    db: DBSession,
    user: User,
    test_id: int | None = None,
    completed: bool | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[TestAttempt]:
    """
    Get attempts for a user, newest first, optionally filtered by test and completion.
    """
    query = (
        select(TestAttempt)
        .options(selectinload(TestAttempt.test))
        .where(TestAttempt.user_id == user.id)
    )

    if test_id is not None:
        query = query.where(TestAttempt.test_id == test_id)
    if completed is not None:
        query = query.where(TestAttempt.is_completed == completed)

    query = (
        query.order_by(TestAttempt.started_at.desc(), TestAttempt.id.desc())
        .limit(limit)
        .offset(offset)
    )

    return list(db.execute(query).scalars().all())


def count_open_attempts(db: DBSession) -> int:
    """Count attempts still accepting answers."""
    query = select(func.count(TestAttempt.id)).where(
        TestAttempt.is_completed == False  # noqa: E712
    )
    return db.execute(query).scalar() or 0


def finalize_expired_attempts(db: DBSession, now: datetime | None = None) -> int:
    """Finalize every open attempt whose deadline has passed. Returns how many."""
    now = as_utc(now or utc_now())
    open_attempts = db.execute(
        select(TestAttempt)
        .options(selectinload(TestAttempt.test).selectinload(Test.questions))
        .where(TestAttempt.is_completed == False)  # noqa: E712
    ).scalars().all()

    finalized = 0
    for attempt in open_attempts:
        if is_expired(attempt, now):
            finalize_attempt(db, attempt, now=now)
            finalized += 1
    return finalized
