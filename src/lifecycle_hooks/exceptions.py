"""Error taxonomy for lifecycle hook dispatch."""

from typing import Optional, Sequence


class LifecycleError(Exception):
    """Base class for every error raised by the lifecycle hook system."""


class LifecycleDeclarationError(LifecycleError):
    """A lifecycle point was re-declared with a different parameter contract."""


class InvalidLifecyclePoint(LifecycleError):
    """
    Target has no lifecycle contract, or the named point is not declared.

    Raised before any hook runs.
    """

    def __init__(self, target: str, point: Optional[str], reason: str):
        self.target = target
        self.point = point
        self.reason = reason
        super().__init__(reason)


class MissingArguments(InvalidLifecyclePoint):
    """Caller supplied fewer values than the lifecycle point's contract."""

    def __init__(self, target: str, point: str, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__(
            target,
            point,
            f"LifeCycle '{point}' expects arguments: {', '.join(self.missing)}",
        )


class HookExecutionFailure(LifecycleError):
    """
    A critical hook failed; remaining hooks in the dispatch were skipped.

    The original error is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, hook_id: str, point: str, target: str, cause: BaseException):
        self.hook_id = hook_id
        self.point = point
        self.target = target
        self.cause = cause
        super().__init__(
            f"Critical hook '{hook_id}' failed in lifecycle '{point}' "
            f"for '{target}': {cause}"
        )


class InvalidHook(LifecycleError):
    """Object cannot be registered as a hook (no lifecycle, no handle)."""


class HookInstantiationError(LifecycleError):
    """The factory could not build a hook from its class identifier."""

    def __init__(self, hook_id: str, reason: str):
        self.hook_id = hook_id
        super().__init__(f"Cannot instantiate hook '{hook_id}': {reason}")


class KernelConfigError(LifecycleError):
    """Kernel ordering configuration is malformed."""
