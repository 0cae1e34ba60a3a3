"""Centralized configuration for lifecycle hooks."""

import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Lifecycle hook configuration with environment variable overrides.

    All configuration values are centralized here with sensible defaults.
    Values can be overridden via environment variables.
    """

    CACHE_BACKENDS = ("memory", "redis", "none")

    # ========================================================================
    # Discovery
    # ========================================================================
    AUTO_DISCOVERY: bool = _env_flag("LIFECYCLE_AUTO_DISCOVERY", True)
    DISCOVERY_PACKAGE: str = os.getenv("LIFECYCLE_DISCOVERY_PACKAGE", "app.hooks")

    # ========================================================================
    # Kernel (explicit hook ordering)
    # ========================================================================
    KERNEL_PATH: str = os.getenv("LIFECYCLE_KERNEL_PATH", "")

    # ========================================================================
    # Resolution Cache
    # ========================================================================
    CACHE_BACKEND: str = os.getenv("LIFECYCLE_CACHE_BACKEND", "memory").strip().lower()
    CACHE_KEY: str = os.getenv("LIFECYCLE_CACHE_KEY", "lifecycle.hooks")
    CACHE_TTL: int = int(os.getenv("LIFECYCLE_CACHE_TTL", "86400"))  # 24 hours

    # ========================================================================
    # Redis Configuration
    # ========================================================================
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2"))

    # ========================================================================
    # Error Handling / Logging
    # ========================================================================
    LOG_FAILURES: bool = _env_flag("LIFECYCLE_LOG_FAILURES", True)
    LOG_LEVEL: str = os.getenv("LIFECYCLE_LOG_LEVEL", "INFO").upper()
    DEBUG: bool = _env_flag("LIFECYCLE_DEBUG", False)

    @classmethod
    def validate(cls) -> bool:
        """
        Validate configuration consistency.

        Checks:
        - CACHE_BACKEND is one of memory, redis, none
        - CACHE_TTL is > 0
        - REDIS_SOCKET_TIMEOUT is > 0

        Returns:
            True if validation passes

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if cls.CACHE_BACKEND not in cls.CACHE_BACKENDS:
            errors.append(
                f"CACHE_BACKEND must be one of {', '.join(cls.CACHE_BACKENDS)}, "
                f"got {cls.CACHE_BACKEND!r}"
            )

        if cls.CACHE_TTL <= 0:
            errors.append(f"CACHE_TTL must be > 0, got {cls.CACHE_TTL}")

        if cls.REDIS_SOCKET_TIMEOUT <= 0:
            errors.append(
                f"REDIS_SOCKET_TIMEOUT must be > 0, got {cls.REDIS_SOCKET_TIMEOUT}"
            )

        if errors:
            raise ValueError(f"Config validation failed: {'; '.join(errors)}")

        return True
