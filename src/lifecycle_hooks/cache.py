"""Resolution cache and its pluggable key-value backends."""

import pickle
import threading
import time
from typing import Any, Optional, Protocol

from loguru import logger
import redis

from .config import Config


class CacheBackend(Protocol):
    """Opaque get/set/delete-with-TTL store used by the resolution cache."""

    def get(self, key: str) -> Any:
        """Return the cached value or None on miss."""

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tag: Optional[str] = None) -> None:
        """Store a value, optionally expiring after `ttl` seconds."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def flush_tag(self, tag: str) -> None:
        """Remove every key stored with `tag`."""


class NullCache:
    """Backend that never stores anything; every lookup is a miss."""

    def get(self, key: str) -> Any:
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tag: Optional[str] = None) -> None:
        return None

    def delete(self, key: str) -> None:
        return None

    def flush_tag(self, tag: str) -> None:
        return None


class MemoryCache:
    """
    Process-local backend with monotonic-clock TTL expiration.

    Values are stored as-is, without serialization.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, Optional[float]]] = {}
        self._tags: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tag: Optional[str] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._entries[key] = (value, expires_at)
            if tag:
                self._tags.setdefault(tag, set()).add(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def flush_tag(self, tag: str) -> None:
        with self._lock:
            for key in self._tags.pop(tag, set()):
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """
    Redis-backed shared cache.

    Values are pickled. Keys written with a tag are indexed in the redis set
    ``tag:{tag}`` so flush_tag() can remove them. Redis errors are logged and
    treated as misses; the cache never fails a resolution.
    """

    def __init__(self, client: Optional[redis.Redis] = None, url: Optional[str] = None):
        """
        Initialize with an existing client or a URL (lazy connection).

        Args:
            client: Pre-built redis client (used by tests and DI containers)
            url: Redis URL (defaults to Config.REDIS_URL)
        """
        self._client = client
        self._url = url or Config.REDIS_URL

    def _get_redis(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(
                self._url,
                socket_connect_timeout=Config.REDIS_SOCKET_TIMEOUT,
                socket_timeout=Config.REDIS_SOCKET_TIMEOUT,
            )
        return self._client

    @staticmethod
    def _tag_key(tag: str) -> str:
        return f"tag:{tag}"

    def get(self, key: str) -> Any:
        try:
            payload = self._get_redis().get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache get failed for {key}: {e}")
            return None
        if payload is None:
            return None
        try:
            return pickle.loads(payload)
        except Exception as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tag: Optional[str] = None) -> None:
        try:
            payload = pickle.dumps(value)
        except Exception as e:
            logger.warning(f"Value for {key} is not cacheable in Redis: {e}")
            return
        try:
            client = self._get_redis()
            if ttl:
                client.setex(key, ttl, payload)
            else:
                client.set(key, payload)
            if tag:
                client.sadd(self._tag_key(tag), key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache set failed for {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self._get_redis().delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache delete failed for {key}: {e}")

    def flush_tag(self, tag: str) -> None:
        try:
            client = self._get_redis()
            tag_key = self._tag_key(tag)
            keys = client.smembers(tag_key)
            if keys:
                client.delete(*keys)
            client.delete(tag_key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache flush failed for tag {tag}: {e}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def build_backend(name: Optional[str] = None) -> CacheBackend:
    """
    Build the cache backend named in configuration.

    Args:
        name: "memory", "redis" or "none" (defaults to Config.CACHE_BACKEND)
    """
    name = (name or Config.CACHE_BACKEND).lower()
    if name == "redis":
        return RedisCache()
    if name == "none":
        return NullCache()
    if name != "memory":
        logger.warning(f"Unknown cache backend {name!r}, using memory")
    return MemoryCache()


class ResolutionCache:
    """
    Memoizes discovered hook class identifiers keyed by (target, point).

    Values are tuples of dotted class paths, never hook instances, so the
    backend may be shared between processes. Read-then-recompute-then-write
    is not atomic; a duplicate discovery under a race finds the same classes.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        prefix: Optional[str] = None,
        ttl: Optional[int] = None,
    ):
        self.backend = backend if backend is not None else MemoryCache()
        self.prefix = prefix or Config.CACHE_KEY
        self.ttl = ttl if ttl is not None else Config.CACHE_TTL
        self.hits = 0
        self.misses = 0

    def key(self, target: str, point: str) -> str:
        return f"{self.prefix}:{target}:{point}"

    def get(self, target: str, point: str) -> Optional[tuple[str, ...]]:
        try:
            value = self.backend.get(self.key(target, point))
        except Exception as e:
            logger.warning(f"Resolution cache read failed for {target}::{point}: {e}")
            value = None
        if value is None:
            self.misses += 1
            return None
        self.hits += 1
        return value

    def set(self, target: str, point: str, hook_ids: tuple[str, ...]) -> None:
        try:
            self.backend.set(self.key(target, point), hook_ids, self.ttl, self.prefix)
        except Exception as e:
            logger.warning(f"Resolution cache write failed for {target}::{point}: {e}")

    def clear(self) -> None:
        try:
            self.backend.flush_tag(self.prefix)
        except Exception as e:
            logger.warning(f"Resolution cache clear failed: {e}")
        logger.info(f"Cleared lifecycle hook cache ({self.prefix})")
