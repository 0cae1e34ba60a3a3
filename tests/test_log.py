"""Tests for logging setup and structured log events."""

import io
import sys

import pytest
from loguru import logger

from lifecycle_hooks.log import configure_logging, log_event


@pytest.fixture
def default_sink():
    """Reinstall loguru's stderr handler after configure_logging() replaced it."""
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_log_event_binds_context(log_records):
    log_event("ERROR", "Hook failed", hook="app.hooks.Fraud", point="before_payment")

    (record,) = [r for r in log_records if r["message"] == "Hook failed"]
    assert record["level"].name == "ERROR"
    assert record["extra"] == {"hook": "app.hooks.Fraud", "point": "before_payment"}


def test_log_event_never_raises():
    def broken_sink(message):
        raise OSError("disk full")

    handler_id = logger.add(broken_sink, catch=False)
    try:
        log_event("WARNING", "still fine", hook="h")
    finally:
        logger.remove(handler_id)


def test_configure_logging_level(default_sink):
    sink = io.StringIO()
    configure_logging(level="WARNING", debug=False, sink=sink)

    logger.info("hidden")
    logger.bind(hook="h").warning("shown")

    output = sink.getvalue()
    assert "hidden" not in output
    assert "shown" in output
    assert "'hook': 'h'" in output


def test_configure_logging_debug_overrides_level(default_sink):
    sink = io.StringIO()
    configure_logging(level="ERROR", debug=True, sink=sink)

    logger.debug("verbose")

    assert "verbose" in sink.getvalue()
