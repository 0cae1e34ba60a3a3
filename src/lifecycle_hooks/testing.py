"""Helpers for testing code that runs lifecycle hooks."""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from .context import LifecycleContext
from .models import ArgumentBag, ExecutionRecord, HookRegistration, Severity


class SequenceRecorder:
    """Observer that keeps every ExecutionRecord in dispatch order."""

    def __init__(self):
        self.records: list[ExecutionRecord] = []

    def on_hook_end(self, record: ExecutionRecord) -> None:
        self.records.append(record)

    @property
    def hook_ids(self) -> list[str]:
        return [r.hook_id for r in self.records]

    def mutations(self) -> dict[str, dict[str, Any]]:
        """Before/after state per hook (last execution wins)."""
        return {r.hook_id: {"before": r.before, "after": r.after} for r in self.records}


@dataclass
class HookSpy:
    """Counts executions of one hook and keeps the arguments it left behind."""

    hook_id: str
    executions: list[dict[str, Any]] = field(default_factory=list)

    def on_hook_end(self, record: ExecutionRecord) -> None:
        if record.hook_id == self.hook_id and record.error is None:
            self.executions.append(record.after or {})

    @property
    def call_count(self) -> int:
        return len(self.executions)

    @property
    def called(self) -> bool:
        return bool(self.executions)

    @property
    def last_args(self) -> Optional[dict[str, Any]]:
        return self.executions[-1] if self.executions else None


class MockHook:
    """Stand-in for a hook: runs `handler`, or raises `fail_with`."""

    def __init__(
        self,
        handler: Optional[Callable[[ArgumentBag], Any]] = None,
        fail_with: Optional[BaseException] = None,
    ):
        self.handler = handler
        self.fail_with = fail_with
        self.calls = 0

    def handle(self, args: ArgumentBag) -> None:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if self.handler is not None:
            self.handler(args)


class HookTestHarness:
    """
    Instruments a LifecycleContext for tests.

    Usage:
        harness = HookTestHarness(context)
        sequence = harness.capture_sequence()
        harness.mock("app.hooks.SendEmail", fail_with=RuntimeError("smtp down"))
        context.run(PaymentService, "after_payment", payment)
        assert sequence.hook_ids == [...]
        harness.restore()
    """

    def __init__(self, context: LifecycleContext):
        self.context = context
        self._observers: list[Any] = []
        self._mocks: dict[str, MockHook] = {}
        self._disabled: set[str] = set()
        self._disable_all = False
        self._severity: Optional[Severity] = None
        context.engine.filters.append(self._filter)

    def capture_sequence(self) -> SequenceRecorder:
        recorder = SequenceRecorder()
        self._attach(recorder)
        return recorder

    def spy(self, hook_id: str) -> HookSpy:
        spy = HookSpy(hook_id)
        self._attach(spy)
        return spy

    def mock(
        self,
        hook_id: str,
        handler: Optional[Callable[[ArgumentBag], Any]] = None,
        fail_with: Optional[BaseException] = None,
    ) -> MockHook:
        """Replace a hook during dispatch; the original severity is kept."""
        mock = MockHook(handler, fail_with)
        self._mocks[hook_id] = mock
        return mock

    def disable(self, *hook_ids: str) -> None:
        self._disabled.update(hook_ids)

    def disable_all(self) -> None:
        self._disable_all = True

    def only_severity(self, severity: Optional[Severity]) -> None:
        """Run only hooks of the given severity (None runs all)."""
        self._severity = severity

    def restore(self) -> None:
        """Detach every observer, mock and filter from the context."""
        for observer in self._observers:
            self.context.engine.remove_observer(observer)
        self._observers.clear()
        if self._filter in self.context.engine.filters:
            self.context.engine.filters.remove(self._filter)
        self._mocks.clear()
        self._disabled.clear()
        self._disable_all = False
        self._severity = None

    def _attach(self, observer: Any) -> None:
        self.context.engine.add_observer(observer)
        self._observers.append(observer)

    def _filter(self, hooks: tuple[HookRegistration, ...]) -> tuple[HookRegistration, ...]:
        if self._disable_all:
            return ()
        result = []
        for registration in hooks:
            if registration.hook_id in self._disabled:
                continue
            if self._severity is not None and registration.severity is not self._severity:
                continue
            mock = self._mocks.get(registration.hook_id)
            if mock is not None:
                registration = replace(registration, hook=mock)
            result.append(registration)
        return tuple(result)
