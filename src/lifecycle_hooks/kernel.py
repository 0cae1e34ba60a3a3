"""Hook kernel: explicit execution order per (target, lifecycle point)."""

from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import yaml
from loguru import logger

from .exceptions import KernelConfigError
from .models import qualified_name, target_id


class HookKernel:
    """
    Explicit hook ordering loaded from code or YAML.

    Structure mirrors the YAML file:

        hooks:
          app.services.PaymentService:
            before_payment:
              - app.hooks.FraudDetectionHook
              - app.hooks.ValidateAmountHook

    Entries may be dotted class paths, classes, or hook instances.
    """

    def __init__(self, hooks: Optional[Mapping[Any, Mapping[str, Sequence[Any]]]] = None):
        self._order: dict[str, dict[str, tuple[Any, ...]]] = {}
        for target, points in (hooks or {}).items():
            if not isinstance(points, Mapping):
                raise KernelConfigError(
                    f"Kernel entry for {target_id(target)} must map lifecycle points to hook lists"
                )
            for point, entries in points.items():
                self.set_order(target, point, entries)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HookKernel":
        """Build a kernel from a parsed ``{"hooks": {...}}`` document."""
        if not isinstance(data, Mapping):
            raise KernelConfigError(
                f"Invalid kernel structure: expected dict, got {type(data).__name__}"
            )
        hooks = data.get("hooks") or {}
        if not isinstance(hooks, Mapping):
            raise KernelConfigError("'hooks' must be a mapping of targets")
        return cls(hooks)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "HookKernel":
        """
        Load a kernel from a YAML file.

        Args:
            yaml_path: Path to the kernel YAML file

        Returns:
            Initialized HookKernel

        Raises:
            FileNotFoundError: If the file doesn't exist
            KernelConfigError: If the YAML is malformed
        """
        kernel_file = Path(yaml_path)
        if not kernel_file.exists():
            raise FileNotFoundError(f"Kernel YAML not found: {yaml_path}")

        try:
            with open(kernel_file) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise KernelConfigError(f"Failed to parse kernel YAML {yaml_path}: {e}") from e

        kernel = cls.from_dict(data or {})
        logger.info(f"Loaded hook kernel from {yaml_path} ({len(kernel)} orderings)")
        return kernel

    def set_order(self, target: Any, point: str, entries: Sequence[Any]) -> None:
        """Set the explicit order for one (target, point) pair."""
        if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
            raise KernelConfigError(
                f"Kernel order for {target_id(target)}::{point} must be a list"
            )
        self._order.setdefault(target_id(target), {})[point] = tuple(entries)

    def explicit_order(self, target: Any, point: str) -> Optional[tuple[Any, ...]]:
        """Ordered hook entries for (target, point), or None if unspecified."""
        return self._order.get(target_id(target), {}).get(point)

    def describe(self) -> dict[str, dict[str, list[str]]]:
        """Return a summary of all orderings for display."""
        return {
            target: {
                point: [e if isinstance(e, str) else qualified_name(e) for e in entries]
                for point, entries in points.items()
            }
            for target, points in self._order.items()
        }

    def __len__(self) -> int:
        return sum(len(points) for points in self._order.values())
