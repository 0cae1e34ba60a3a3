"""Lifecycle hooks: ordered, severity-classified extension points for services.

Key components:
- LifecycleRegistry: parameter contracts per target type
- HookCatalog: manual, discovered and kernel-ordered hooks
- ExecutionEngine: validation, argument binding, severity policy
- LifecycleContext: owns all of the above for one process

Usage:
    @lifecycle_point("before_payment", ["user_id", "amount"])
    class PaymentService:
        ...

    @hook("PaymentService", "before_payment", Severity.CRITICAL)
    class FraudCheck(Hook):
        def handle(self, args):
            if args["amount"] > 10000:
                raise ValueError("suspicious amount")

    context = LifecycleContext()
    context.add_hook(PaymentService, FraudCheck())
    args = context.run(PaymentService, "before_payment", user_id, amount)
    user_id, amount = args.unpack()
"""

__version__ = "0.1.0"

from .cache import MemoryCache, NullCache, RedisCache, ResolutionCache, build_backend
from .catalog import HookCatalog
from .config import Config
from .context import (
    LifecycleContext,
    add_hook,
    build_context,
    get_context,
    remove_hooks_for,
    run_hook,
    set_context,
)
from .declarations import declared_points, lifecycle_point
from .discovery import HookFactory, PackageDiscovery
from .engine import ExecutionEngine
from .exceptions import (
    HookExecutionFailure,
    HookInstantiationError,
    InvalidHook,
    InvalidLifecyclePoint,
    KernelConfigError,
    LifecycleDeclarationError,
    LifecycleError,
    MissingArguments,
)
from .hooks import FunctionHook, Hook, hook
from .kernel import HookKernel
from .mixin import LifecycleMixin
from .models import (
    ArgumentBag,
    DispatchState,
    ExecutionRecord,
    HookRegistration,
    LifecyclePointDef,
    Severity,
)
from .naming import candidate_identifiers
from .registry import LifecycleRegistry

__all__ = [
    "__version__",
    # Context
    "LifecycleContext",
    "build_context",
    "get_context",
    "set_context",
    "run_hook",
    "add_hook",
    "remove_hooks_for",
    # Core
    "ExecutionEngine",
    "HookCatalog",
    "LifecycleRegistry",
    "candidate_identifiers",
    # Hooks and declarations
    "Hook",
    "FunctionHook",
    "hook",
    "lifecycle_point",
    "LifecycleMixin",
    "declared_points",
    # Collaborators
    "HookKernel",
    "PackageDiscovery",
    "HookFactory",
    "ResolutionCache",
    "MemoryCache",
    "NullCache",
    "RedisCache",
    "build_backend",
    "Config",
    # Models
    "ArgumentBag",
    "DispatchState",
    "ExecutionRecord",
    "HookRegistration",
    "LifecyclePointDef",
    "Severity",
    # Errors
    "LifecycleError",
    "LifecycleDeclarationError",
    "InvalidLifecyclePoint",
    "MissingArguments",
    "HookExecutionFailure",
    "InvalidHook",
    "HookInstantiationError",
    "KernelConfigError",
]
