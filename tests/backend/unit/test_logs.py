"""
Unit tests for the in-memory log buffer behind /admin/logs.
"""
import logging

from quotes_api.core.logs import RecentLogHandler


def _logger(handler, name="quotes_api.test_logs"):
    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    return logger


def test_snapshot_is_newest_first_and_filtered():
    handler = RecentLogHandler(capacity=10)
    log = _logger(handler)
    log.debug("one")
    log.warning("two")
    log.error("three")

    rows = handler.snapshot(min_level=logging.WARNING)
    assert [r["message"] for r in rows] == ["three", "two"]
    assert rows[0]["level"] == "error"
    assert rows[0]["source"] == "quotes_api.test_logs"
    assert "levelno" not in rows[0]


def test_capacity_and_limit():
    handler = RecentLogHandler(capacity=3)
    log = _logger(handler, "quotes_api.test_logs.capacity")
    for i in range(5):
        log.info("msg %d", i)

    assert [r["message"] for r in handler.snapshot()] == ["msg 4", "msg 3", "msg 2"]
    assert len(handler.snapshot(limit=1)) == 1
