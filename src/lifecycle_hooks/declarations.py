"""Lifecycle declaration source: how target classes publish their points."""

from typing import Any, Callable, Sequence

POINTS_ATTR = "__lifecycle_points__"


def lifecycle_point(name: str, parameters: Sequence[str] = ()) -> Callable[[type], type]:
    """
    Class decorator declaring one lifecycle point and its parameter contract.

    Repeatable; points keep the order in which they appear in source
    (decorators apply bottom-up, so each new point is prepended).

    Usage:
        @lifecycle_point("before_payment", ["user_id", "amount"])
        @lifecycle_point("after_payment", ["user_id", "amount", "receipt"])
        class PaymentService:
            ...
    """

    def decorator(cls: type) -> type:
        existing = dict(getattr(cls, POINTS_ATTR, {}))
        points = {name: tuple(parameters)}
        points.update(existing)
        setattr(cls, POINTS_ATTR, points)
        return cls

    return decorator


def declared_points(target: Any) -> dict[str, tuple[str, ...]]:
    """
    Read the lifecycle points a target type declares.

    Checks, in order, the ``@lifecycle_point`` decorator registry and a
    ``lifecycle_points`` attribute (a mapping, or a callable returning one).
    Strings and classes without declarations declare nothing.

    Args:
        target: Target class or instance

    Returns:
        Mapping of point name -> parameter names
    """
    if isinstance(target, str):
        return {}

    cls = target if isinstance(target, type) else type(target)
    points: dict[str, tuple[str, ...]] = {}

    decorated = getattr(cls, POINTS_ATTR, None)
    if decorated:
        points.update(decorated)

    attr = getattr(cls, "lifecycle_points", None)
    if callable(attr):
        attr = attr()
    if attr:
        for name, parameters in dict(attr).items():
            points.setdefault(name, tuple(parameters))

    return points
