"""Data models for lifecycle hook resolution and dispatch."""

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Optional, Sequence


class Severity(str, Enum):
    """How a hook failure is treated during dispatch."""

    CRITICAL = "critical"
    OPTIONAL = "optional"

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """
        Coerce a Severity or its string value.

        Raises:
            ValueError: If the value names no severity
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(
            f"Unknown severity {value!r}; expected one of: {', '.join(s.value for s in cls)}"
        )


class HookSource(str, Enum):
    """Where a registration came from."""

    MANUAL = "manual"
    DISCOVERED = "discovered"
    INSTANCE = "instance"


class Disposition(str, Enum):
    """Classification of a single hook invocation."""

    CONTINUE = "continue"
    LOGGED_CONTINUE = "logged_continue"
    ABORT = "abort"


class DispatchState(str, Enum):
    """States of a single dispatch call."""

    VALIDATING = "validating"
    RESOLVING = "resolving"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    ABORTED = "aborted"
    REJECTED = "rejected"


def qualified_name(obj: Any) -> str:
    """
    Return the identifier of a class, an instance's class, or a string.

    Classes map to "module.QualName"; strings pass through unchanged.
    """
    if isinstance(obj, str):
        return obj
    cls = obj if isinstance(obj, type) else type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def target_id(target: Any) -> str:
    """Identifier of a lifecycle target (class, instance or string)."""
    return qualified_name(target)


def short_name(identifier: str) -> str:
    """Last dotted segment of an identifier ("app.PaymentService" -> "PaymentService")."""
    return identifier.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class LifecyclePointDef:
    """
    Parameter contract of one lifecycle point on a target type.

    Immutable once declared; read by every dispatch.
    """

    target: str
    name: str
    parameters: tuple[str, ...] = ()

    def missing_from(self, supplied: int) -> tuple[str, ...]:
        """Trailing parameter names not covered by `supplied` positional values."""
        return self.parameters[supplied:]


@dataclass(frozen=True)
class HookRegistration:
    """
    A hook bound to one (target, point) pair.

    Lifecycle and severity are read from the hook once, at registration time,
    and never re-read during dispatch.
    """

    hook: Any
    hook_id: str
    target: str
    point: str
    severity: Severity = Severity.OPTIONAL
    source: HookSource = HookSource.MANUAL
    scope: str = ""

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL

    def describe(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "hook": self.hook_id,
            "target": self.target,
            "point": self.point,
            "severity": self.severity.value,
            "source": self.source.value,
            "scope": self.scope,
        }


class ArgumentBag(MutableMapping):
    """
    Named, mutable view over a dispatch call's positional values.

    Keys are fixed to the lifecycle point's parameter names: hooks may
    reassign values but cannot add or remove names. The same bag is handed
    to every hook in turn and returned to the caller after dispatch.
    """

    __slots__ = ("_point", "_values")

    def __init__(self, point: LifecyclePointDef, values: Sequence[Any]):
        self._point = point
        self._values: dict[str, Any] = {
            name: values[index] for index, name in enumerate(point.parameters)
        }

    @property
    def point(self) -> LifecyclePointDef:
        return self._point

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise KeyError(
                f"'{name}' is not a parameter of lifecycle '{self._point.name}' "
                f"(expected one of: {', '.join(self._point.parameters)})"
            )
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        raise KeyError(f"Cannot remove parameter '{name}' from an argument bag")

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ArgumentBag({self._point.name!r}, {self._values!r})"

    def values_tuple(self) -> tuple[Any, ...]:
        """Current values in declared parameter order."""
        return tuple(self._values[name] for name in self._point.parameters)

    def unpack(self) -> tuple[Any, ...]:
        """Alias of values_tuple() for ``a, b = bag.unpack()``."""
        return self.values_tuple()

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current name -> value mapping."""
        return dict(self._values)


@dataclass
class HookOutcome:
    """Result of invoking one hook, classified by severity alone."""

    registration: HookRegistration
    error: Optional[BaseException] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def disposition(self) -> Disposition:
        if self.error is None:
            return Disposition.CONTINUE
        if self.registration.is_critical:
            return Disposition.ABORT
        return Disposition.LOGGED_CONTINUE


@dataclass
class ExecutionRecord:
    """
    Diagnostic trace entry for one hook invocation.

    Only produced for attached observers; never used for dispatch decisions.
    """

    hook_id: str
    lifecycle: str
    target: str
    severity: Severity
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    before: dict[str, Any] = field(default_factory=dict)
    after: Optional[dict[str, Any]] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hook": self.hook_id,
            "lifecycle": self.lifecycle,
            "target": self.target,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "before": self.before,
            "after": self.after,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }
