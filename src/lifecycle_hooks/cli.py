"""Command line tools: inspect a target's lifecycle and clear the hook cache."""

import argparse
import importlib
import sys
from typing import Optional

from loguru import logger

from .context import LifecycleContext, build_context
from .exceptions import LifecycleError
from .log import configure_logging
from .models import Severity, target_id


def load_target(reference: str) -> type:
    """
    Import a target class from "package.module:Class" or "package.module.Class".

    Raises:
        ImportError: If the module or attribute does not exist
    """
    if ":" in reference:
        module_name, _, attr = reference.partition(":")
    else:
        module_name, _, attr = reference.rpartition(".")
    if not module_name or not attr:
        raise ImportError(f"'{reference}' is not a module:Class reference")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"{module_name} has no attribute {attr}") from e


def analyze(context: LifecycleContext, target: type, out=None) -> int:
    """Print points, resolved hooks and severity totals for a target."""
    if out is None:
        out = sys.stdout
    tid = target_id(target)
    context.registry.ensure_declared(target)
    points = context.registry.points_for(target)

    print(f"Analyzing lifecycle for: {tid}", file=out)
    if not points:
        print(f"No lifecycle points found in {tid}", file=out)
        return 0

    print(f"\nLifecycle Points ({len(points)}):", file=out)
    for point in points:
        print(f"  - {point.name}: [{', '.join(point.parameters)}]", file=out)

    print("\nHook Analysis:", file=out)
    total_critical = 0
    total_optional = 0
    for point in points:
        hooks = context.hooks_for(target, point.name)
        critical = sum(1 for h in hooks if h.severity is Severity.CRITICAL)
        optional = len(hooks) - critical
        total_critical += critical
        total_optional += optional
        print(
            f"  - {point.name}: {len(hooks)} hooks ({critical} critical, {optional} optional)",
            file=out,
        )
        for registration in hooks:
            print(
                f"    - {registration.hook_id} [{registration.severity.value}] "
                f"({registration.source.value}, scope: {registration.scope or 'unknown'})",
                file=out,
            )

    print("\nSummary:", file=out)
    print(f"  - Total hooks: {total_critical + total_optional}", file=out)
    print(f"  - Critical hooks: {total_critical}", file=out)
    print(f"  - Optional hooks: {total_optional}", file=out)
    if total_critical:
        print(
            f"\nWarning: {tid} has {total_critical} critical hooks that raise on failure.",
            file=out,
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifecycle-hooks",
        description="Inspect lifecycle points and manage the hook resolution cache",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze lifecycle points and hooks for a class"
    )
    analyze_parser.add_argument("target", help="Target class as module:Class")

    subparsers.add_parser("clear-cache", help="Clear the hook resolution cache")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug or None)

    try:
        context = build_context()
    except (ValueError, LifecycleError, FileNotFoundError) as e:
        logger.error(f"Cannot build lifecycle context: {e}")
        return 1

    try:
        if args.command == "analyze":
            try:
                target = load_target(args.target)
            except ImportError as e:
                print(f"Class {args.target} does not exist: {e}", file=sys.stderr)
                return 1
            return analyze(context, target)

        context.clear_cache()
        print("Lifecycle hook cache cleared.")
        return 0
    finally:
        context.close()
