"""HTTP error taxonomy raised by the service layer."""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Missing test, question or attempt."""

    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthenticatedError(HTTPException):
    """No valid session for the request."""

    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    """Attempt belongs to another user."""

    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(HTTPException):
    """Mutating call against an attempt that no longer accepts answers."""

    def __init__(self, detail: str = "Attempt already completed") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class AnswerValidationError(HTTPException):
    """Answer payload does not fit the question type."""

    def __init__(self, detail: str = "Invalid answer") -> None:
        super().__init__(
            status_code=422, detail=detail
        )
