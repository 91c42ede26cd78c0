"""Test series catalog endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_optional_user
from exam_api.models import TestSeriesDetailResponse, TestSeriesResponse
from exam_api.models.db.user import User
from exam_api.serialization import serialize_test_series_detail
from exam_api.services import test_service

router = APIRouter(prefix="/api/test-series", tags=["test-series"])


@router.get("", response_model=list[TestSeriesResponse])
def list_test_series(
    current_user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[TestSeriesResponse]:
    """List published test series (admins also see drafts)."""
    include_unpublished = current_user is not None and current_user.is_admin
    return [
        TestSeriesResponse.model_validate(series)
        for series in test_service.list_test_series(db, include_unpublished)
    ]


@router.get("/{series_id}", response_model=TestSeriesDetailResponse)
def get_test_series(
    series_id: int,
    current_user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> TestSeriesDetailResponse:
    """Get a test series with its active tests."""
    include_unpublished = current_user is not None and current_user.is_admin
    series = test_service.get_test_series(db, series_id, include_unpublished)
    return serialize_test_series_detail(series)
