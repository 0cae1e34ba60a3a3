"""Execution engine: validation, argument binding and severity policy."""

import copy
import time
from typing import Any, Callable, Mapping, Optional, Sequence

from loguru import logger

from .catalog import HookCatalog
from .config import Config
from .exceptions import HookExecutionFailure, InvalidLifecyclePoint, MissingArguments
from .log import log_event
from .models import (
    ArgumentBag,
    DispatchState,
    Disposition,
    ExecutionRecord,
    HookOutcome,
    HookRegistration,
    LifecyclePointDef,
    target_id,
)
from .registry import LifecycleRegistry

HookFilter = Callable[[tuple[HookRegistration, ...]], tuple[HookRegistration, ...]]


def _copy_state(bag: ArgumentBag) -> dict[str, Any]:
    snapshot = bag.snapshot()
    try:
        return copy.deepcopy(snapshot)
    except Exception:
        return snapshot


class ExecutionEngine:
    """
    Runs the hooks of one lifecycle point against a shared argument bag.

    Dispatch is synchronous and sequential:
    Validating -> Resolving -> Dispatching(i) -> Completed | Aborted,
    with validation failures ending in Rejected before any hook runs.

    Failure policy is decided by severity alone:
    - CRITICAL: raise HookExecutionFailure, skip the remaining hooks
    - OPTIONAL: log the error, continue with the next hook

    Mutations made before a critical failure (including partial mutations by
    the failing hook) are not rolled back.
    """

    def __init__(
        self,
        registry: LifecycleRegistry,
        catalog: HookCatalog,
        log_failures: Optional[bool] = None,
        debug: Optional[bool] = None,
    ):
        self.registry = registry
        self.catalog = catalog
        self.log_failures = Config.LOG_FAILURES if log_failures is None else log_failures
        self.debug = Config.DEBUG if debug is None else debug
        self.observers: list[Any] = []
        self.filters: list[HookFilter] = []

    def add_observer(self, observer: Any) -> None:
        """
        Attach an observer.

        Observers may define on_hook_start(record), on_hook_end(record) and
        on_dispatch_end(target, point, state); all are optional.
        """
        self.observers.append(observer)

    def remove_observer(self, observer: Any) -> bool:
        try:
            self.observers.remove(observer)
            return True
        except ValueError:
            return False

    def validate(self, target: Any, point: str, supplied: int) -> LifecyclePointDef:
        """
        Check the call against the target's lifecycle contract.

        Args:
            target: Lifecycle target (class, instance or identifier)
            point: Lifecycle point name
            supplied: Number of positional values supplied

        Returns:
            The lifecycle point definition

        Raises:
            InvalidLifecyclePoint: Target has no points, or point not declared
            MissingArguments: Fewer values than declared parameters
        """
        definition = self._contract(target, point)
        if supplied < len(definition.parameters):
            raise MissingArguments(definition.target, point, definition.missing_from(supplied))
        return definition

    def _contract(self, target: Any, point: str) -> LifecyclePointDef:
        tid = target_id(target)
        self.registry.ensure_declared(target)

        if not self.registry.has_any(target):
            raise InvalidLifecyclePoint(tid, point, f"Class '{tid}' has no lifecycle points")

        definition = self.registry.lookup(target, point)
        if definition is None:
            raise InvalidLifecyclePoint(tid, point, f"LifeCycle '{point}' is not defined in {tid}")
        return definition

    def run(
        self,
        target: Any,
        point: str,
        *args: Any,
        extra_hooks: Sequence[HookRegistration] = (),
    ) -> ArgumentBag:
        """
        Run all hooks of a lifecycle point.

        Args:
            target: Lifecycle target (class, instance or identifier)
            point: Lifecycle point name
            *args: Positional values bound in order to the point's parameters;
                values beyond the contract are ignored
            extra_hooks: Registrations run after the resolved hooks, e.g. the
                hooks held by one target instance

        Returns:
            The argument bag holding every hook's mutations

        Raises:
            InvalidLifecyclePoint: Undeclared target or point (no hook runs)
            MissingArguments: Too few values (no hook runs)
            HookExecutionFailure: A critical hook failed
        """
        try:
            definition = self.validate(target, point, len(args))
        except InvalidLifecyclePoint as e:
            logger.debug(f"Rejected lifecycle call {target_id(target)}::{point}: {e}")
            self._notify_dispatch_end(target_id(target), point, DispatchState.REJECTED)
            raise

        bag = ArgumentBag(definition, args)
        self._dispatch(definition, bag, extra_hooks)
        return bag

    dispatch = run

    def run_mapping(
        self,
        target: Any,
        point: str,
        values: Mapping[str, Any],
        extra_hooks: Sequence[HookRegistration] = (),
    ) -> ArgumentBag:
        """
        Run hooks with values bound by parameter name instead of position.

        Raises:
            MissingArguments: If any declared parameter is absent from `values`
        """
        definition = self._contract(target, point)
        missing = [name for name in definition.parameters if name not in values]
        if missing:
            raise MissingArguments(definition.target, point, missing)
        bag = ArgumentBag(definition, [values[name] for name in definition.parameters])
        self._dispatch(definition, bag, extra_hooks)
        return bag

    def _dispatch(
        self,
        definition: LifecyclePointDef,
        bag: ArgumentBag,
        extra_hooks: Sequence[HookRegistration] = (),
    ) -> None:
        tid, point = definition.target, definition.name
        hooks = self.catalog.resolve(tid, point)
        extra = tuple(r for r in extra_hooks if r.point == point)
        if extra:
            hooks = hooks + extra
        for hook_filter in self.filters:
            hooks = hook_filter(hooks)

        for registration in hooks:
            outcome = self._invoke(registration, bag)
            disposition = outcome.disposition

            if disposition is Disposition.ABORT:
                logger.warning(
                    f"Critical hook {registration.hook_id} failed, aborting {tid}::{point}"
                )
                self._notify_dispatch_end(tid, point, DispatchState.ABORTED)
                raise HookExecutionFailure(
                    registration.hook_id, point, tid, outcome.error
                ) from outcome.error

            if disposition is Disposition.LOGGED_CONTINUE:
                self._report(outcome)

        self._notify_dispatch_end(tid, point, DispatchState.COMPLETED)

    def _invoke(self, registration: HookRegistration, bag: ArgumentBag) -> HookOutcome:
        record = None
        if self.observers:
            record = ExecutionRecord(
                hook_id=registration.hook_id,
                lifecycle=registration.point,
                target=registration.target,
                severity=registration.severity,
                before=_copy_state(bag),
            )
            self._notify("on_hook_start", record)

        start = time.perf_counter()
        error: Optional[BaseException] = None
        try:
            registration.hook.handle(bag)
        except Exception as e:
            error = e
        duration_ms = (time.perf_counter() - start) * 1000.0

        if self.debug:
            logger.debug(
                f"Hook {registration.hook_id} on {registration.target}::{registration.point} "
                f"{'failed' if error else 'ok'} in {duration_ms:.2f}ms"
            )

        if record is not None:
            record.after = _copy_state(bag)
            record.duration_ms = duration_ms
            record.error = str(error) if error else None
            self._notify("on_hook_end", record)

        return HookOutcome(registration=registration, error=error, duration_ms=duration_ms)

    def _report(self, outcome: HookOutcome) -> None:
        if not self.log_failures:
            return
        registration = outcome.registration
        log_event(
            "ERROR",
            f"Hook failed in lifecycle '{registration.point}' for class '{registration.target}'",
            hook=registration.hook_id,
            severity=registration.severity.value,
            point=registration.point,
            target=registration.target,
            error=str(outcome.error),
        )

    def _notify(self, method: str, *args: Any) -> None:
        for observer in list(self.observers):
            callback = getattr(observer, method, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception as e:
                logger.warning(f"Lifecycle observer {observer!r}.{method} failed: {e}")

    def _notify_dispatch_end(self, target: str, point: str, state: DispatchState) -> None:
        if self.observers:
            self._notify("on_dispatch_end", target, point, state)
