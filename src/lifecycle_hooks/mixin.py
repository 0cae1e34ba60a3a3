"""Mixin letting a service run its own lifecycle points and hold its own hooks."""

from typing import Any, Iterable, Optional

from .catalog import make_registration
from .context import LifecycleContext, get_context
from .models import ArgumentBag, HookRegistration, HookSource


class LifecycleMixin:
    """
    Gives a target class instance-level access to the lifecycle system.

    Hooks registered with the context for the class run first, in resolved
    order; hooks added to one instance run after them, in insertion order,
    and only when that instance runs the point. Both follow the same
    severity policy.

    Usage:
        @lifecycle_point("before_payment", ["user_id", "amount"])
        class PaymentService(LifecycleMixin):
            def pay(self, user_id, amount):
                user_id, amount = self.run_lifecycle_hook(
                    "before_payment", user_id, amount
                ).unpack()
                ...

        service = PaymentService()
        service.add_hook(AuditHook())
    """

    lifecycle_context: Optional[LifecycleContext] = None

    def _get_lifecycle_context(self) -> LifecycleContext:
        return self.lifecycle_context or get_context()

    def _instance_hooks(self) -> list[HookRegistration]:
        hooks = self.__dict__.get("_lifecycle_hooks")
        if hooks is None:
            hooks = self.__dict__["_lifecycle_hooks"] = []
        return hooks

    def run_lifecycle_hook(self, point: str, *args: Any) -> ArgumentBag:
        """
        Run a lifecycle point of this instance.

        Raises:
            InvalidLifecyclePoint: Undeclared point, or too few values
            HookExecutionFailure: A critical hook failed
        """
        return self._get_lifecycle_context().run(
            self, point, *args, extra_hooks=tuple(self._instance_hooks())
        )

    def add_hook(self, hook: Any, point: Optional[str] = None) -> HookRegistration:
        """
        Attach a hook to this instance only.

        Raises:
            InvalidHook: If the hook has no handle(), no lifecycle point or an
                unknown severity
        """
        registration = make_registration(self, hook, point, source=HookSource.INSTANCE)
        self._instance_hooks().append(registration)
        return registration

    def set_hooks(self, hooks: Iterable[Any]) -> None:
        """Replace every instance hook."""
        registrations = [make_registration(self, h, source=HookSource.INSTANCE) for h in hooks]
        self.__dict__["_lifecycle_hooks"] = registrations

    def get_hooks(self, point: Optional[str] = None) -> tuple[Any, ...]:
        """Instance hooks, optionally limited to one point."""
        return tuple(
            r.hook for r in self._instance_hooks() if point is None or r.point == point
        )

    def remove_hooks_for(self, point: str) -> int:
        """Remove the instance hooks of one point; returns how many were removed."""
        hooks = self._instance_hooks()
        kept = [r for r in hooks if r.point != point]
        removed = len(hooks) - len(kept)
        hooks[:] = kept
        return removed
