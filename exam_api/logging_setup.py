from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler

from exam_api.config import LOG_FILE, LOG_LEVEL

# Libraries that log every statement or request at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def setup_console_logging(level: int = LOG_LEVEL, log_file: str | None = LOG_FILE) -> None:
    """
    Call once at process start (API server or CLI).
    Logs go to stderr, and additionally to a rotating file when LOG_FILE is set.
    """
    root = logging.getLogger()
    if root.handlers:
        # already configured (avoid duplicates)
        root.setLevel(level)
        return

    root.setLevel(level)
    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
