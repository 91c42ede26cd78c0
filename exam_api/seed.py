"""Demo catalog used by `cli.py seed-demo` and local development."""
from decimal import Decimal

from sqlalchemy.orm import Session as DbSession

from exam_api.models.db.test import (
    Explanation,
    Option,
    Question,
    QuestionType,
    Test,
    TestSeries,
)


def _single_choice(
    text: str,
    options: list[str],
    correct_index: int,
    marks: int,
    explanation: str | None = None,
) -> Question:
    question = Question(
        question_text=text,
        question_type=QuestionType.SINGLE_CHOICE.value,
        marks=marks,
        options=[
            Option(option_text=option, is_correct=index == correct_index)
            for index, option in enumerate(options)
        ],
    )
    if explanation:
        question.explanation = Explanation(explanation=explanation)
    return question


def _fill_blank(text: str, accepted: list[str], marks: int) -> Question:
    return Question(
        question_text=text,
        question_type=QuestionType.FILL_BLANK.value,
        marks=marks,
        options=[Option(option_text=answer, is_correct=True) for answer in accepted],
    )


def seed_demo_catalog(db: DbSession) -> TestSeries:
    """Insert one published series with a short mock test."""
    questions = [
        _single_choice(
            "What is the derivative of sin(x)?",
            ["cos(x)", "-cos(x)", "sin(x)", "-sin(x)"],
            correct_index=0,
            marks=4,
            explanation="d/dx sin(x) = cos(x).",
        ),
        _single_choice(
            "If log2(x) = 5, then x equals",
            ["10", "25", "32", "64"],
            correct_index=2,
            marks=4,
            explanation="x = 2^5 = 32.",
        ),
        _fill_blank("The value of 7 × 8 is ____.", ["56"], marks=4),
        Question(
            question_text="Explain why the harmonic series diverges.",
            question_type=QuestionType.FREE_TEXT.value,
            marks=8,
        ),
    ]
    for position, question in enumerate(questions, start=1):
        question.position = position

    test = Test(
        title="JEE Main Mock Test 1",
        description="Full-syllabus mock test in the JEE Main pattern.",
        instructions="Each wrong single-choice or fill-blank answer deducts a quarter of its marks.",
        duration=30,
        total_marks=sum(question.marks for question in questions),
        passing_marks=8,
        negative_marking=Decimal("0.25"),
        is_active=True,
        questions=questions,
    )
    series = TestSeries(
        title="JEE Main Mock Test Series",
        description="Complete mock tests with JEE Main pattern, difficulty level and time constraints.",
        category="JEE Main/Advanced",
        price=3499,
        features=["All India Rank Comparison", "Detailed Performance Analysis"],
        is_published=True,
        tests=[test],
    )
    db.add(series)
    db.commit()
    db.refresh(series)
    return series
