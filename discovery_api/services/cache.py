"""
Result caches for trending pages and trust scores.

MemoryCache wraps cachetools.TTLCache (in-process, one TTL per cache).
RedisCache stores JSON payloads with SETEX; Redis errors are logged and
treated as a miss so a cache outage never fails a read.
Both expose get / set / delete_prefix / stats.
"""

import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, Protocol

import redis
from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ResultCache(Protocol):
    """Key/value cache with a fixed TTL. Values must be JSON-serialisable."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns how many were dropped."""
        ...

    def stats(self) -> Dict[str, Any]:
        ...


class MemoryCache:
    """In-process TTL cache. cachetools caches are not thread-safe, so access is locked."""

    def __init__(
        self,
        ttl_seconds: int,
        maxsize: int = 4096,
        timer: Optional[Callable[[], float]] = None,
    ):
        if timer is not None:
            self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        else:
            self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()
        self.ttl_seconds = ttl_seconds
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._cache.keys() if k.startswith(prefix)]
            for k in keys:
                self._cache.pop(k, None)
            return len(keys)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._cache)
        return {
            "backend": "memory",
            "ttl_seconds": self.ttl_seconds,
            "size": size,
            "hits": self.hits,
            "misses": self.misses,
        }


class RedisCache:
    """Redis-backed cache, keys namespaced so several caches can share one database."""

    def __init__(self, client: "redis.Redis", ttl_seconds: int, namespace: str):
        self._redis = client
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int, namespace: str) -> "RedisCache":
        client = redis.Redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, ttl_seconds, namespace)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self._redis.get(self._key(key))
        except redis.RedisError as e:
            logger.error("Error getting cache key %s: %s", key, e)
            self.misses += 1
            return None
        if value is None:
            self.misses += 1
            return None
        self.hits += 1
        return json.loads(value)

    def set(self, key: str, value: Any) -> None:
        try:
            self._redis.setex(self._key(key), self.ttl_seconds, json.dumps(value))
        except redis.RedisError as e:
            logger.error("Error setting cache key %s: %s", key, e)

    def delete_prefix(self, prefix: str) -> int:
        try:
            keys = list(self._redis.scan_iter(match=f"{self._key(prefix)}*"))
            if keys:
                self._redis.delete(*keys)
            return len(keys)
        except redis.RedisError as e:
            logger.error("Error deleting cache prefix %s: %s", prefix, e)
            return 0

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except redis.RedisError as e:
            logger.warning("Redis not reachable: %s", e)
            return False

    def stats(self) -> Dict[str, Any]:
        return {
            "backend": "redis",
            "namespace": self.namespace,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
        }


def build_cache(ttl_seconds: int, namespace: str, redis_url: Optional[str] = None) -> ResultCache:
    """Redis when a URL is configured, otherwise in-process."""
    if redis_url:
        logger.info("Cache %s: Redis (%s)", namespace, redis_url)
        return RedisCache.from_url(redis_url, ttl_seconds, namespace)
    return MemoryCache(ttl_seconds)
