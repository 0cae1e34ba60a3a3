"""Hook base class and hook descriptors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .exceptions import InvalidHook
from .models import ArgumentBag, Severity, qualified_name


class Hook(ABC):
    """
    Abstract base class for lifecycle hooks.

    Subclasses set ``lifecycle`` (the point they attach to) and optionally
    ``severity`` and ``scope`` as class attributes, or use the ``@hook``
    decorator, and implement ``handle``.

    Example:
        @hook("PaymentService", "before_payment", Severity.CRITICAL)
        class FraudCheck(Hook):
            def handle(self, args):
                if args["amount"] > 10000:
                    raise ValueError("amount exceeds fraud threshold")
    """

    lifecycle: str = ""
    severity: Severity = Severity.OPTIONAL
    scope: str = ""

    @abstractmethod
    def handle(self, args: ArgumentBag) -> None:
        """
        Run the hook against the shared argument bag.

        Args:
            args: Mutable mapping of parameter name -> value; assignments are
                visible to later hooks and to the caller

        Raises:
            Any exception to signal failure; the engine applies severity policy
        """


def _severity(value: Any, owner: str) -> Severity:
    try:
        return Severity.parse(value)
    except ValueError as e:
        raise InvalidHook(f"{owner}: {e}") from e


def hook(
    scope: str,
    point: str,
    severity: Union[Severity, str] = Severity.OPTIONAL,
) -> Callable[[type], type]:
    """
    Class decorator declaring a hook's scope, point and severity.

    Usage:
        @hook("PaymentService", "payment.failed")
        class LogError(Hook):
            ...

    Raises:
        InvalidHook: If `severity` is not critical or optional
    """

    def decorator(cls: type) -> type:
        cls.scope = scope
        cls.lifecycle = point
        cls.severity = _severity(severity, qualified_name(cls))
        return cls

    return decorator


class FunctionHook(Hook):
    """Adapts a plain callable ``fn(args)`` to the Hook interface."""

    def __init__(
        self,
        fn: Callable[[ArgumentBag], Any],
        lifecycle: str,
        severity: Union[Severity, str] = Severity.OPTIONAL,
        name: Optional[str] = None,
    ):
        self._fn = fn
        self.lifecycle = lifecycle
        self.name = name or getattr(fn, "__qualname__", repr(fn))
        self.severity = _severity(severity, self.name)

    def handle(self, args: ArgumentBag) -> None:
        self._fn(args)

    def __repr__(self) -> str:
        return f"FunctionHook({self.name!r}, {self.lifecycle!r}, {self.severity.value})"


@dataclass(frozen=True)
class HookDescriptor:
    """Lifecycle metadata read from a hook once, at registration time."""

    hook_id: str
    lifecycle: str
    severity: Severity
    scope: str = ""


def hook_id(obj: Any) -> str:
    """Identifier of a hook instance or class; function hooks use their name."""
    if isinstance(obj, FunctionHook):
        return obj.name
    return qualified_name(obj)


def describe_hook(obj: Any, point: Optional[str] = None) -> HookDescriptor:
    """
    Read a hook's descriptor.

    Args:
        obj: Hook instance (anything with a callable ``handle``)
        point: Explicit point overriding the hook's own ``lifecycle``

    Returns:
        HookDescriptor with the resolved lifecycle and severity

    Raises:
        InvalidHook: If the object has no ``handle``, no lifecycle, or an
            unknown severity
    """
    if not callable(getattr(obj, "handle", None)):
        raise InvalidHook(f"{qualified_name(obj)} does not define handle(args)")

    lifecycle = point or getattr(obj, "lifecycle", "") or ""
    if not lifecycle:
        raise InvalidHook(f"{qualified_name(obj)} does not declare a lifecycle point")

    return HookDescriptor(
        hook_id=hook_id(obj),
        lifecycle=lifecycle,
        severity=_severity(getattr(obj, "severity", Severity.OPTIONAL), qualified_name(obj)),
        scope=getattr(obj, "scope", "") or "",
    )
