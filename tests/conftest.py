"""Pytest fixtures and test utilities for the lifecycle hooks test suite."""

from typing import Any

import pytest
from loguru import logger

from lifecycle_hooks import (
    FunctionHook,
    Hook,
    LifecycleContext,
    Severity,
    lifecycle_point,
    set_context,
)


# ============================================================================
# TARGETS
# ============================================================================


@lifecycle_point("before_payment", ["user_id", "amount"])
@lifecycle_point("calculate", ["amount", "fee"])
class PaymentService:
    """Lifecycle target used across the suite."""


# ============================================================================
# HOOK FACTORIES
# ============================================================================


class RecordingHook(Hook):
    """Hook that appends its name to a shared log and optionally fails or mutates."""

    def __init__(
        self,
        name: str,
        lifecycle: str,
        severity: Severity = Severity.OPTIONAL,
        calls: list = None,
        fail: bool = False,
        mutate=None,
    ):
        self.name = name
        self.lifecycle = lifecycle
        self.severity = severity
        self.calls = calls if calls is not None else []
        self.fail = fail
        self.mutate = mutate

    def handle(self, args):
        self.calls.append(self.name)
        if self.mutate is not None:
            self.mutate(args)
        if self.fail:
            raise RuntimeError(f"{self.name} failed")


def make_hook(fn, point: str, severity: Severity = Severity.OPTIONAL, name: str = None) -> FunctionHook:
    """Wrap a function as a hook."""
    return FunctionHook(fn, point, severity, name=name)


# ============================================================================
# CONTEXT FIXTURES
# ============================================================================


@pytest.fixture
def context():
    """
    Provide a fresh context with discovery disabled.

    Yields:
        LifecycleContext with an in-memory resolution cache
    """
    ctx = LifecycleContext(auto_discovery=False, log_failures=True, debug=False)
    yield ctx
    ctx.close()


@pytest.fixture
def calls() -> list:
    """Shared execution log for RecordingHook instances."""
    return []


@pytest.fixture
def default_context(context):
    """Install `context` as the process default for module-level helpers."""
    set_context(context)
    yield context
    set_context(None)


# ============================================================================
# LOG CAPTURE
# ============================================================================


@pytest.fixture
def log_records():
    """
    Capture loguru records emitted during a test.

    Yields:
        List of loguru record dicts (level, message, extra, ...)
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG", format="{message}")
    try:
        yield records
    finally:
        logger.remove(handler_id)
