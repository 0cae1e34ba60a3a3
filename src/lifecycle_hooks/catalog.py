"""Hook catalog: manual registrations, discovered hooks and kernel ordering."""

import threading
from typing import Any, Optional, Sequence

from loguru import logger

from .cache import ResolutionCache
from .discovery import HookFactory, PackageDiscovery
from .exceptions import HookInstantiationError, InvalidHook
from .hooks import FunctionHook, describe_hook
from .kernel import HookKernel
from .models import HookRegistration, HookSource, qualified_name, target_id
from .naming import candidate_identifiers


def make_registration(
    target: Any,
    hook: Any,
    point: Optional[str] = None,
    source: HookSource = HookSource.MANUAL,
) -> HookRegistration:
    """
    Bind a hook instance to a target, reading its descriptor once.

    Raises:
        InvalidHook: If the hook has no handle(), no lifecycle point or an
            unknown severity
    """
    descriptor = describe_hook(hook, point)
    return HookRegistration(
        hook=hook,
        hook_id=descriptor.hook_id,
        target=target_id(target),
        point=descriptor.lifecycle,
        severity=descriptor.severity,
        source=source,
        scope=descriptor.scope,
    )


class HookCatalog:
    """
    Resolves the ordered hook list for a (target, lifecycle point).

    Sources, merged in this order:
    1. Manually registered hooks (insertion order)
    2. Discovered hooks (naming convention + factory)
    3. Kernel ordering, applied over the union of 1 and 2

    Two caches are involved. The ResolutionCache holds the discovered hook
    class identifiers and may live in a shared backend (redis); it never
    sees hook instances. The resolved registration lists are memoized per
    catalog, since they hold this catalog's own hook instances.

    Mutations hold the catalog lock, as does the compute-and-store step
    of resolve(), so a resolution never observes a half-applied change.
    """

    def __init__(
        self,
        kernel: Optional[HookKernel] = None,
        discovery: Optional[PackageDiscovery] = None,
        factory: Optional[HookFactory] = None,
        cache: Optional[ResolutionCache] = None,
        auto_discovery: bool = True,
    ):
        self._kernel = kernel
        self._discovery = discovery
        self._factory = factory or HookFactory()
        self.cache = cache or ResolutionCache()
        self.auto_discovery = auto_discovery
        self._manual: dict[str, list[HookRegistration]] = {}
        self._resolved: dict[tuple[str, str], tuple[HookRegistration, ...]] = {}
        self._lock = threading.RLock()

    @property
    def kernel(self) -> Optional[HookKernel]:
        return self._kernel

    def set_kernel(self, kernel: Optional[HookKernel]) -> None:
        """Replace the kernel; every resolved list is dropped."""
        with self._lock:
            self._kernel = kernel
            self._resolved.clear()

    def register(self, target: Any, hook: Any, point: Optional[str] = None) -> HookRegistration:
        """
        Register a hook instance for a target.

        Args:
            target: Lifecycle target (class, instance or identifier)
            hook: Hook instance
            point: Explicit lifecycle point, overriding the hook's own

        Returns:
            The new registration

        Raises:
            InvalidHook: If the hook has no handle(), no lifecycle point or an
                unknown severity
        """
        registration = make_registration(target, hook, point)
        tid = registration.target
        with self._lock:
            self._manual.setdefault(tid, []).append(registration)
            self._resolved.pop((tid, registration.point), None)
        logger.debug(
            f"Registered hook {registration.hook_id} on {tid}::{registration.point} "
            f"[{registration.severity.value}]"
        )
        return registration

    def unregister_all(self, target: Any, point: str) -> int:
        """
        Remove every manually registered hook for (target, point).

        Returns:
            Number of registrations removed
        """
        tid = target_id(target)
        with self._lock:
            current = self._manual.get(tid, [])
            kept = [r for r in current if r.point != point]
            removed = len(current) - len(kept)
            self._manual[tid] = kept
            self._resolved.pop((tid, point), None)
        if removed:
            logger.debug(f"Removed {removed} hooks from {tid}::{point}")
        return removed

    def unregister(self, target: Any, hook: Any) -> bool:
        """Remove one hook instance (by identity) from a target."""
        tid = target_id(target)
        with self._lock:
            current = self._manual.get(tid, [])
            for index, registration in enumerate(current):
                if registration.hook is hook:
                    del current[index]
                    self._resolved.pop((tid, registration.point), None)
                    return True
        return False

    def registrations_for(self, target: Any) -> tuple[HookRegistration, ...]:
        """All manual registrations for a target, across points."""
        return tuple(self._manual.get(target_id(target), ()))

    def resolve(self, target: Any, point: str) -> tuple[HookRegistration, ...]:
        """
        Get the ordered hooks for (target, point), computing on first use.

        Returns:
            Tuple of HookRegistration in execution order
        """
        tid = target_id(target)
        resolved = self._resolved.get((tid, point))
        if resolved is not None:
            return resolved

        with self._lock:
            resolved = self._resolved.get((tid, point))
            if resolved is None:
                resolved = self._compute(target, tid, point)
                self._resolved[(tid, point)] = resolved
        return resolved

    def clear_cache(self) -> None:
        """Drop every resolved list and every cached discovery result."""
        with self._lock:
            self._resolved.clear()
        self.cache.clear()

    def _compute(self, target: Any, tid: str, point: str) -> tuple[HookRegistration, ...]:
        manual = [r for r in self._manual.get(tid, ()) if r.point == point]
        discovered = self._discover(target, tid, point)
        union = manual + discovered

        order = self._kernel.explicit_order(tid, point) if self._kernel else None
        if order is None:
            return tuple(union)
        return self._apply_order(union, order, tid, point)

    def _discovered_ids(self, target: Any, tid: str, point: str) -> tuple[str, ...]:
        cached = self.cache.get(tid, point)
        if cached is not None:
            return tuple(cached)

        try:
            hook_ids = tuple(self._discovery.discover(target, candidate_identifiers(point)))
        except Exception as e:
            logger.warning(f"Hook discovery failed for {tid}::{point}: {e}")
            return ()
        self.cache.set(tid, point, hook_ids)
        return hook_ids

    def _discover(self, target: Any, tid: str, point: str) -> list[HookRegistration]:
        if not self.auto_discovery or self._discovery is None:
            return []

        registrations = []
        for hook_path in self._discovered_ids(target, tid, point):
            try:
                hook = self._factory.instantiate(hook_path)
                registration = make_registration(tid, hook, source=HookSource.DISCOVERED)
            except (HookInstantiationError, InvalidHook) as e:
                logger.warning(f"Skipping discovered hook {hook_path}: {e}")
                continue

            if registration.point == point:
                registrations.append(registration)
        return registrations

    @staticmethod
    def _matches(entry: Any, registration: HookRegistration) -> bool:
        if isinstance(entry, str):
            if isinstance(registration.hook, FunctionHook):
                return entry == registration.hook_id
            return entry in (registration.hook_id, qualified_name(registration.hook))
        if isinstance(entry, type):
            return type(registration.hook) is entry
        return registration.hook is entry

    def _apply_order(
        self,
        union: list[HookRegistration],
        order: Sequence[Any],
        tid: str,
        point: str,
    ) -> tuple[HookRegistration, ...]:
        """
        Place kernel-named hooks first, in kernel order; append the rest.

        Every hook matching a kernel entry lands at that entry's position,
        in union order. Unnamed hooks keep their relative union order.
        """
        remaining = list(union)
        ordered: list[HookRegistration] = []
        for entry in order:
            matches = [r for r in remaining if self._matches(entry, r)]
            if not matches:
                logger.debug(f"Kernel entry {entry!r} for {tid}::{point} matched no hook")
                continue
            ordered.extend(matches)
            matched = {id(r) for r in matches}
            remaining = [r for r in remaining if id(r) not in matched]
        return tuple(ordered + remaining)
