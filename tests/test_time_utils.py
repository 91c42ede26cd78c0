from datetime import datetime, timedelta, timezone

from exam_api.utils import time_utils


def test_utc_now_is_aware() -> None:
    assert time_utils.utc_now().tzinfo is not None


def test_as_utc_treats_naive_as_utc() -> None:
    naive = datetime(2024, 1, 1, 12, 0, 0)
    assert time_utils.as_utc(naive) == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    ist = timezone(timedelta(hours=5, minutes=30))
    local = datetime(2024, 1, 1, 17, 30, 0, tzinfo=ist)
    assert time_utils.as_utc(local).hour == 12


def test_elapsed_seconds_mixes_naive_and_aware() -> None:
    start = datetime(2024, 1, 1, 12, 0, 0)
    end = datetime(2024, 1, 1, 12, 10, 30, tzinfo=timezone.utc)
    assert time_utils.elapsed_seconds(start, end) == 630
    assert time_utils.elapsed_seconds(end, start) == 0
