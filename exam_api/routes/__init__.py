"""API route modules."""
from exam_api.routes import attempts, auth, questions, test_series, tests, users

__all__ = ["attempts", "auth", "questions", "test_series", "tests", "users"]
