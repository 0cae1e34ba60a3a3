"""Lifecycle registry: parameter contracts per target type."""

import threading
from typing import Any, Callable, Mapping, Optional, Sequence

from loguru import logger

from .declarations import declared_points
from .exceptions import LifecycleDeclarationError
from .models import LifecyclePointDef, target_id


class LifecycleRegistry:
    """
    Stores, per target type, the ordered parameter contract of each point.

    Contracts are populated either explicitly via declare() or lazily from
    the declaration source the first time a target is seen.
    """

    def __init__(
        self,
        source: Callable[[Any], Mapping[str, Sequence[str]]] = declared_points,
    ):
        """
        Initialize an empty registry.

        Args:
            source: Declaration source returning point -> parameter names
        """
        self._source = source
        self._points: dict[str, dict[str, LifecyclePointDef]] = {}
        self._consumed: set[str] = set()
        self._lock = threading.Lock()

    def declare(self, target: Any, point: str, parameters: Sequence[str] = ()) -> LifecyclePointDef:
        """
        Declare a lifecycle point on a target.

        Idempotent when the parameters match an existing declaration.

        Raises:
            LifecycleDeclarationError: If the point exists with other parameters
        """
        tid = target_id(target)
        definition = LifecyclePointDef(target=tid, name=point, parameters=tuple(parameters))
        with self._lock:
            points = self._points.setdefault(tid, {})
            existing = points.get(point)
            if existing is not None:
                if existing.parameters != definition.parameters:
                    raise LifecycleDeclarationError(
                        f"LifeCycle '{point}' on {tid} already declared with parameters "
                        f"({', '.join(existing.parameters)}), got ({', '.join(definition.parameters)})"
                    )
                return existing
            points[point] = definition
        logger.debug(f"Declared lifecycle {tid}::{point}({', '.join(definition.parameters)})")
        return definition

    def declare_many(self, target: Any, points: Mapping[str, Sequence[str]]) -> None:
        """Declare every point in a name -> parameters mapping."""
        for name, parameters in points.items():
            self.declare(target, name, parameters)

    def ensure_declared(self, target: Any) -> None:
        """Consume the declaration source for a target type exactly once."""
        tid = target_id(target)
        if tid in self._consumed:
            return
        points = self._source(target)
        self._consumed.add(tid)
        if points:
            self.declare_many(target, points)

    def lookup(self, target: Any, point: str) -> Optional[LifecyclePointDef]:
        """Get the contract of a point, or None if it is not declared."""
        return self._points.get(target_id(target), {}).get(point)

    def has_any(self, target: Any) -> bool:
        """Check if the target declares at least one lifecycle point."""
        return bool(self._points.get(target_id(target)))

    def points_for(self, target: Any) -> tuple[LifecyclePointDef, ...]:
        """All points of a target in declaration order."""
        return tuple(self._points.get(target_id(target), {}).values())

    def targets(self) -> list[str]:
        """Identifiers of all targets with at least one point."""
        return sorted(tid for tid, points in self._points.items() if points)

    def forget(self, target: Any) -> None:
        """Drop a target's contract so the declaration source is read again."""
        tid = target_id(target)
        with self._lock:
            self._points.pop(tid, None)
            self._consumed.discard(tid)
