"""Utility modules."""
from exam_api.utils.time_utils import as_utc, elapsed_seconds, utc_now

__all__ = [
    "as_utc",
    "elapsed_seconds",
    "utc_now",
]
