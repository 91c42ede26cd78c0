from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import exam_api.models.db  # noqa: F401
from exam_api.app import app
from exam_api.database import Base, get_db
from exam_api.models.db.test import Option, Question, QuestionType, Test
from exam_api.models.db.user import UserRole
from exam_api.services.auth_service import create_user, issue_token


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        # No context manager: startup hooks (init_db, sweeper thread) stay off
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return create_user(db, "alice", "alice@example.com", "secret123", full_name="Alice")


@pytest.fixture
def other_user(db):
    return create_user(db, "bob", "bob@example.com", "secret123", full_name="Bob")


@pytest.fixture
def admin(db):
    return create_user(
        db, "root", "root@example.com", "secret123", full_name="Root", role=UserRole.ADMIN
    )


@pytest.fixture
def auth_headers(db, user):
    return {"Authorization": f"Bearer {issue_token(db, user)}"}


@pytest.fixture
def other_headers(db, other_user):
    return {"Authorization": f"Bearer {issue_token(db, other_user)}"}


@pytest.fixture
def admin_headers(db, admin):
    return {"Authorization": f"Bearer {issue_token(db, admin)}"}


def make_single_choice(text: str, marks: int, position: int) -> Question:
    """Question with options 'right' (correct) and 'wrong'."""
    return Question(
        question_text=text,
        question_type=QuestionType.SINGLE_CHOICE.value,
        marks=marks,
        position=position,
        options=[
            Option(option_text="right", is_correct=True),
            Option(option_text="wrong", is_correct=False),
        ],
    )


@pytest.fixture
def mock_test(db):
    """Two single-choice questions of 5 marks, half-mark penalty, 10 minutes."""
    test = Test(
        title="Physics Mock 1",
        description="Kinematics",
        instructions="Answer all questions.",
        duration=10,
        total_marks=10,
        passing_marks=4,
        negative_marking=Decimal("0.5"),
        questions=[
            make_single_choice("Q1", marks=5, position=1),
            make_single_choice("Q2", marks=5, position=2),
        ],
    )
    db.add(test)
    db.commit()
    db.refresh(test)
    return test


def option_id(question: Question, text: str) -> int:
    return next(option.id for option in question.options if option.option_text == text)
