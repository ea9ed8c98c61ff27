"""
TTL key/value store backing every resolver lookup.

Cache is an optimization, not a source of truth: no method here raises.
Failures are logged at DEBUG and reported as a miss / False / 0.
Values are stored as JSON text, so every read hands out an independent snapshot
and concurrent writers simply overwrite each other (last write wins).
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from d6bridge.config import AppConfig


logger = logging.getLogger(__name__)


class CacheStore(ABC):
    backend = "abstract"

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0

    @abstractmethod
    def _read(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def _write(self, key: str, text: str, ttl_s: int) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def delete_by_prefix(self, prefix: str) -> int: ...

    def get(self, key: str) -> Any:
        try:
            text = self._read(key)
            value = None if text is None else json.loads(text)
        except Exception as e:
            logger.debug("Cache get failed for %s: %s", key, e)
            text, value = None, None

        if text is None:
            self.misses += 1
            logger.debug("Cache miss %s", key)
            return None
        self.hits += 1
        logger.debug("Cache hit %s", key)
        return value

    def set(self, key: str, value: Any, ttl_s: int) -> bool:
        try:
            text = json.dumps(value)
            self._write(key, text, ttl_s)
        except Exception as e:
            logger.debug("Cache set failed for %s (ttl=%ss): %s", key, ttl_s, e)
            return False
        logger.debug("Cache set %s ttl=%ss size=%d", key, ttl_s, len(text))
        return True

    def stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "backend": self.backend,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total, 2) if total else 0.0,
        }


class MemoryCacheStore(CacheStore):
    """In-process store. Expiry is enforced lazily on read; there is no sweeper."""

    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}  # key -> (json, expires_at)

    def _read(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        text, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return text

    def _write(self, key: str, text: str, ttl_s: int) -> None:
        self._entries[key] = (text, self._clock() + ttl_s)

    def expires_at(self, key: str) -> Optional[float]:
        entry = self._entries.get(key)
        return entry[1] if entry else None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_by_prefix(self, prefix: str) -> int:
        doomed = [k for k in list(self._entries) if k.startswith(prefix)]
        for k in doomed:
            self._entries.pop(k, None)
        logger.debug("Cache prefix delete %s removed %d", prefix, len(doomed))
        return len(doomed)

    def stats(self) -> dict[str, Any]:
        out = super().stats()
        now = self._clock()
        out["keys"] = sum(1 for _, expires_at in self._entries.values() if expires_at > now)
        out["connected"] = True
        return out


class RedisCacheStore(CacheStore):
    """Adapter over an existing sync redis-py client. TTL handled natively by SETEX."""

    backend = "redis"

    def __init__(self, client: Any) -> None:
        super().__init__()
        self._client = client

    @classmethod
    def from_url(cls, url: str, **redis_kwargs: Any) -> "RedisCacheStore":
        import redis

        return cls(redis.from_url(url, **redis_kwargs))

    def _read(self, key: str) -> Optional[str]:
        raw = self._client.get(key)
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else raw

    def _write(self, key: str, text: str, ttl_s: int) -> None:
        self._client.setex(key, int(ttl_s), text)

    def delete(self, key: str) -> bool:
        try:
            return self._client.delete(key) > 0
        except Exception as e:
            logger.debug("Cache delete failed for %s: %s", key, e)
            return False

    def delete_by_prefix(self, prefix: str) -> int:
        # SCAN, never KEYS: safe on a shared production instance
        try:
            keys = list(self._client.scan_iter(match=f"{prefix}*"))
            removed = self._client.delete(*keys) if keys else 0
        except Exception as e:
            logger.debug("Cache prefix delete failed for %s: %s", prefix, e)
            return 0
        logger.debug("Cache prefix delete %s removed %d", prefix, removed)
        return removed

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except Exception as e:
            logger.debug("Cache ping failed: %s", e)
            return False

    def stats(self) -> dict[str, Any]:
        out = super().stats()
        out["connected"] = self.ping()
        return out


def get_cache_store(cfg: AppConfig) -> CacheStore:
    if cfg.cache_backend == "redis" and cfg.redis_url:
        return RedisCacheStore.from_url(cfg.redis_url)
    return MemoryCacheStore()
