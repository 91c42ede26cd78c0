"""Service for periodic housekeeping: expired attempts and stale sessions."""
import logging
import threading
import time

from exam_api.config import ATTEMPT_SWEEP_INTERVAL_SECONDS
from exam_api.database import SessionLocal
from exam_api.services.attempt_service import finalize_expired_attempts
from exam_api.services.auth_service import cleanup_expired_sessions

logger = logging.getLogger(__name__)


def sweep_expired_attempts() -> int:
    """Finalize abandoned attempts whose deadline has passed."""
    try:
        db = SessionLocal()
        try:
            finalized = finalize_expired_attempts(db)
            if finalized > 0:
                logger.info(f"Finalized {finalized} expired attempts")
            removed = cleanup_expired_sessions(db)
            if removed > 0:
                logger.info(f"Removed {removed} expired sessions")
            return finalized
        finally:
            db.close()
    except Exception as e:
        logger.error(f"Failed to sweep expired attempts: {e}")
        return 0


def schedule_attempt_sweep(interval: int = ATTEMPT_SWEEP_INTERVAL_SECONDS) -> threading.Thread | None:
    """Start a daemon thread that sweeps expired attempts every `interval` seconds."""
    if interval <= 0:
        logger.info("Attempt sweep disabled")
        return None

    def _worker() -> None:
        while True:
            time.sleep(interval)
            sweep_expired_attempts()

    thread = threading.Thread(
        target=_worker,
        name="attempts_sweep",
        daemon=True,
    )
    thread.start()
    return thread
