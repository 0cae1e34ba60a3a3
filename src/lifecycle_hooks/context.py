"""Lifecycle context: the object that owns registry, catalog, cache and engine."""

from typing import Any, Mapping, Optional, Sequence

from loguru import logger

from .cache import CacheBackend, ResolutionCache, build_backend
from .catalog import HookCatalog
from .config import Config
from .discovery import HookFactory, PackageDiscovery
from .engine import ExecutionEngine
from .kernel import HookKernel
from .models import ArgumentBag, HookRegistration, LifecyclePointDef
from .registry import LifecycleRegistry


class LifecycleContext:
    """
    Process-level lifecycle hook context.

    Constructed once at startup and passed to call sites (or installed as
    the process default with set_context()). Owns:
    - LifecycleRegistry: point contracts per target
    - HookCatalog: registrations, discovery, kernel ordering
    - ResolutionCache: memoized resolutions over a cache backend
    - ExecutionEngine: dispatch and severity policy
    """

    def __init__(
        self,
        kernel: Optional[HookKernel] = None,
        discovery: Optional[PackageDiscovery] = None,
        factory: Optional[HookFactory] = None,
        cache: Optional[CacheBackend] = None,
        auto_discovery: Optional[bool] = None,
        log_failures: Optional[bool] = None,
        debug: Optional[bool] = None,
    ):
        self.registry = LifecycleRegistry()
        self.resolution_cache = ResolutionCache(cache)
        self.catalog = HookCatalog(
            kernel=kernel,
            discovery=discovery,
            factory=factory,
            cache=self.resolution_cache,
            auto_discovery=Config.AUTO_DISCOVERY if auto_discovery is None else auto_discovery,
        )
        self.engine = ExecutionEngine(
            self.registry,
            self.catalog,
            log_failures=log_failures,
            debug=debug,
        )

    def run(
        self,
        target: Any,
        point: str,
        *args: Any,
        extra_hooks: Sequence[HookRegistration] = (),
    ) -> ArgumentBag:
        """Run the hooks of `point` on `target`; see ExecutionEngine.run."""
        return self.engine.run(target, point, *args, extra_hooks=extra_hooks)

    def run_mapping(self, target: Any, point: str, values: Mapping[str, Any]) -> ArgumentBag:
        """Run hooks binding values by parameter name."""
        return self.engine.run_mapping(target, point, values)

    def declare(self, target: Any, point: str, parameters: Sequence[str] = ()) -> LifecyclePointDef:
        """Declare a lifecycle point on a target."""
        return self.registry.declare(target, point, parameters)

    def add_hook(self, target: Any, hook: Any, point: Optional[str] = None) -> HookRegistration:
        """Register a hook instance for a target."""
        return self.catalog.register(target, hook, point)

    def remove_hooks_for(self, target: Any, point: str) -> int:
        """Remove every manually registered hook of (target, point)."""
        return self.catalog.unregister_all(target, point)

    def hooks_for(self, target: Any, point: str) -> tuple[HookRegistration, ...]:
        """Resolved hooks of (target, point) in execution order."""
        return self.catalog.resolve(target, point)

    def set_kernel(self, kernel: Optional[HookKernel]) -> None:
        self.catalog.set_kernel(kernel)

    def clear_cache(self) -> None:
        self.catalog.clear_cache()

    def close(self) -> None:
        """Release the cache backend; shared cache entries are left in place."""
        close = getattr(self.resolution_cache.backend, "close", None)
        if callable(close):
            close()


def build_context(config: type = Config) -> LifecycleContext:
    """
    Build a LifecycleContext from configuration.

    - Kernel loaded from config.KERNEL_PATH when set
    - Package discovery under config.DISCOVERY_PACKAGE when AUTO_DISCOVERY
    - Cache backend selected by config.CACHE_BACKEND
    """
    config.validate()

    kernel = HookKernel.from_yaml(config.KERNEL_PATH) if config.KERNEL_PATH else None
    discovery = PackageDiscovery(config.DISCOVERY_PACKAGE) if config.AUTO_DISCOVERY else None

    context = LifecycleContext(
        kernel=kernel,
        discovery=discovery,
        cache=build_backend(config.CACHE_BACKEND),
        auto_discovery=config.AUTO_DISCOVERY,
        log_failures=config.LOG_FAILURES,
        debug=config.DEBUG,
    )
    logger.info(
        f"Lifecycle context ready (discovery={'on' if discovery else 'off'}, "
        f"kernel={'on' if kernel else 'off'}, cache={config.CACHE_BACKEND})"
    )
    return context


_default_context: Optional[LifecycleContext] = None


def get_context() -> LifecycleContext:
    """Get the process default context, building it from Config on first use."""
    global _default_context
    if _default_context is None:
        _default_context = build_context()
    return _default_context


def set_context(context: Optional[LifecycleContext]) -> None:
    """Install (or with None, reset) the process default context."""
    global _default_context
    _default_context = context


def run_hook(target: Any, point: str, *args: Any) -> ArgumentBag:
    """
    Run lifecycle hooks on the default context.

    Usage:
        args = run_hook(PaymentService, "before_payment", user_id, amount)
        user_id, amount = args.unpack()
    """
    return get_context().run(target, point, *args)


def add_hook(target: Any, hook: Any, point: Optional[str] = None) -> HookRegistration:
    """Register a hook on the default context."""
    return get_context().add_hook(target, hook, point)


def remove_hooks_for(target: Any, point: str) -> int:
    """Remove manual hooks of (target, point) on the default context."""
    return get_context().remove_hooks_for(target, point)
