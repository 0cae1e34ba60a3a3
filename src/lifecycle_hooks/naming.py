"""Naming conventions that map lifecycle point names to discovery identifiers.

Discovery targets are Python module names, which cannot contain dots, so a
point such as ``payment.failed`` is probed as ``PaymentFailed``,
``Payment_Failed`` and ``payment_failed``.
"""

import re

_CAMEL_BOUNDARY = re.compile(r"[a-z0-9][A-Z]")
_SNAKE_SPLIT = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _title(part: str) -> str:
    return part[:1].upper() + part[1:]


def _dedupe(candidates: list[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen[candidate] = None
    return tuple(seen)


def candidate_identifiers(point: str) -> tuple[str, ...]:
    """
    Build the ordered discovery candidates for a lifecycle point name.

    Rules:
    - dot.separated: PascalCase, Title_Case_With_Underscore, dots -> underscores
    - snake_case: PascalCase, Title_Case_With_Underscore, original
    - camelCase: derived snake_case, TitleCase, original
    - single token: original

    Args:
        point: Lifecycle point name

    Returns:
        De-duplicated candidates in probe order; none contains "."
    """
    if "." in point:
        parts = [p for p in point.split(".") if p]
        return _dedupe(
            [
                "".join(_title(p) for p in parts),
                "_".join(_title(p) for p in parts),
                "_".join(parts),
            ]
        )

    if "_" in point:
        parts = [p for p in point.split("_") if p]
        return _dedupe(
            [
                "".join(_title(p) for p in parts),
                "_".join(_title(p) for p in parts),
                point,
            ]
        )

    if _CAMEL_BOUNDARY.search(point):
        snake = "_".join(_SNAKE_SPLIT.split(point)).lower()
        return _dedupe([snake, _title(point), point])

    return _dedupe([point])
