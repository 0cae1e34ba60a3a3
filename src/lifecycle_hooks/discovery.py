"""Hook discovery by naming convention, and the hook factory."""

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Any, Callable, Iterable, Optional

from loguru import logger

from .exceptions import HookInstantiationError
from .hooks import Hook
from .models import qualified_name, short_name, target_id


def _is_missing(error: ModuleNotFoundError, module_name: str) -> bool:
    """True when the error is about `module_name` itself or one of its parents."""
    missing = error.name or ""
    return module_name == missing or module_name.startswith(missing + ".")


class PackageDiscovery:
    """
    Finds hook classes under ``{root_package}.{TargetName}.{Candidate}``.

    For a target ``app.services.PaymentService`` and point ``payment.failed``
    the probed modules are ``app.hooks.PaymentService.PaymentFailed``,
    ``app.hooks.PaymentService.Payment_Failed`` and
    ``app.hooks.PaymentService.payment_failed``. A probed package has every
    submodule scanned.
    """

    def __init__(self, root_package: str):
        self.root_package = root_package

    def _import(self, module_name: str) -> Optional[ModuleType]:
        try:
            return importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if _is_missing(e, module_name):
                return None
            logger.warning(f"Failed to import hook module {module_name}: {e}")
        except Exception as e:
            logger.warning(f"Failed to import hook module {module_name}: {e}")
        return None

    def _modules(self, module_name: str) -> Iterable[ModuleType]:
        module = self._import(module_name)
        if module is None:
            return
        yield module
        if hasattr(module, "__path__"):
            for info in sorted(pkgutil.iter_modules(module.__path__), key=lambda m: m.name):
                submodule = self._import(f"{module_name}.{info.name}")
                if submodule is not None:
                    yield submodule

    @staticmethod
    def _hook_classes(module: ModuleType) -> Iterable[type]:
        for obj in vars(module).values():
            if (
                inspect.isclass(obj)
                and issubclass(obj, Hook)
                and obj.__module__ == module.__name__
                and not inspect.isabstract(obj)
            ):
                yield obj

    def discover(self, target: Any, candidates: Iterable[str]) -> tuple[str, ...]:
        """
        Collect hook class identifiers for a target and candidate names.

        Args:
            target: Lifecycle target (class, instance or identifier)
            candidates: Module names to probe, in order

        Returns:
            De-duplicated hook class identifiers in discovery order
        """
        base = f"{self.root_package}.{short_name(target_id(target))}"
        found: dict[str, None] = {}
        for candidate in candidates:
            for module in self._modules(f"{base}.{candidate}"):
                for cls in self._hook_classes(module):
                    found.setdefault(qualified_name(cls), None)
        if found:
            logger.debug(f"Discovered {len(found)} hook classes under {base}")
        return tuple(found)


def import_hook_class(hook_path: str) -> type:
    """Import a class from its dotted ``module.ClassName`` path."""
    module_name, _, class_name = hook_path.rpartition(".")
    if not module_name:
        raise ImportError(f"'{hook_path}' is not a dotted class path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, class_name)
    except AttributeError as e:
        raise ImportError(f"{module_name} has no attribute {class_name}") from e


class HookFactory:
    """
    Builds hook instances from class identifiers.

    A provider (for example a DI container's resolve method) may be supplied
    to control construction; otherwise the class is called with no arguments.
    """

    def __init__(self, provider: Optional[Callable[[type], Any]] = None):
        self._provider = provider

    def instantiate(self, hook: Any) -> Any:
        """
        Build a hook instance.

        Args:
            hook: Dotted class path or class

        Returns:
            The hook instance

        Raises:
            HookInstantiationError: If import or construction fails
        """
        hook_path = hook if isinstance(hook, str) else qualified_name(hook)
        try:
            cls = import_hook_class(hook) if isinstance(hook, str) else hook
            if self._provider is not None:
                return self._provider(cls)
            return cls()
        except Exception as e:
            raise HookInstantiationError(hook_path, str(e)) from e
