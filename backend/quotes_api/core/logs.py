# quotes_api/core/logs.py
"""
Logging setup.
Attaches a console handler and an in-memory ring buffer to the package logger.
The buffer backs the admin log viewer (/api/admin/logs).
"""
import logging
import datetime as dt
from collections import deque

from quotes_api.config import settings

LOGGER_NAME = "quotes_api"

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


class RecentLogHandler(logging.Handler):
    """
    Keeps the last `capacity` records as plain dicts, newest last.
    """

    def __init__(self, capacity: int = 500):
        super().__init__()
        self.records: deque[dict] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.records.append({
                "timestamp": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat(),
                "level": record.levelname.lower(),
                "levelno": record.levelno,
                "message": record.getMessage(),
                "source": record.name,
            })
        except Exception:
            self.handleError(record)

    def snapshot(self, min_level: int = logging.NOTSET, limit: int = 100) -> list[dict]:
        """Newest first, filtered to records at or above min_level."""
        rows = [r for r in reversed(self.records) if r["levelno"] >= min_level]
        return [{k: v for k, v in r.items() if k != "levelno"} for r in rows[:limit]]


recent_logs = RecentLogHandler(capacity=settings.log_buffer_size)


def configure_logging() -> logging.Logger:
    """
    Configure the package logger once. Safe to call repeatedly.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger  # already configured

    logger.setLevel(settings.log_level.upper())

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(console_handler)
    logger.addHandler(recent_logs)
    return logger
