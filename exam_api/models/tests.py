"""Catalog and question-bank Pydantic models."""
from decimal import Decimal

from pydantic import BaseModel


class OptionResponse(BaseModel):
    """Answer option. is_correct is omitted unless answers may be revealed."""

    id: int
    option_text: str
    is_correct: bool | None = None


class QuestionResponse(BaseModel):
    """Question as listed for a test (never carries correctness)."""

    id: int
    test_id: int
    question_text: str
    question_type: str
    marks: int
    image_url: str | None = None
    position: int

    class Config:
        from_attributes = True


class QuestionDetailResponse(QuestionResponse):
    """Question with its options and explanation."""

    options: list[OptionResponse] = []
    explanation: str | None = None


class TestResponse(BaseModel):
    """Test definition."""

    id: int
    test_series_id: int | None
    title: str
    description: str
    instructions: str | None
    duration: int
    total_marks: int
    passing_marks: int
    negative_marking: Decimal
    is_active: bool
    question_count: int = 0

    class Config:
        from_attributes = True


class TestSeriesResponse(BaseModel):
    """Test series summary."""

    id: int
    title: str
    description: str
    category: str
    price: int
    features: list[str]
    is_published: bool

    class Config:
        from_attributes = True


class TestSeriesDetailResponse(TestSeriesResponse):
    """Test series with its active tests."""

    tests: list[TestResponse] = []
