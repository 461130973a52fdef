"""In-memory TTL cache for remote service responses."""

from __future__ import annotations

import hashlib
import json
import time
from typing import Callable, TypeVar, cast

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def cache_key(prefix: str, payload: dict) -> str:
    """Stable key for a request body: ``prefix:<sha256 of sorted JSON>``."""
    digest = hashlib.sha256(
        json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
    ).hexdigest()
    return f"{prefix}:{digest}"


class ResponseCache:
    """Pydantic models stored as JSON, each entry expiring after ``ttl_seconds``.

    Parameters
    ----------
    ttl_seconds:
        Lifetime of an entry. ``0`` disables caching.
    clock:
        Monotonic time source, replaceable in tests.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, str]] = {}

    async def set_model(self, key: str, value: BaseModel) -> None:
        """Store ``value`` under ``key`` until the TTL elapses."""
        if self.ttl_seconds <= 0:
            return
        now = self._clock()
        self.purge_expired(now)
        self._store[key] = (now + self.ttl_seconds, value.model_dump_json())

    def purge_expired(self, now: float | None = None) -> int:
        """Drop every stale entry; returns how many were removed."""
        now = self._clock() if now is None else now
        stale = [key for key, (expires_at, _) in self._store.items() if now >= expires_at]
        for key in stale:
            del self._store[key]
        return len(stale)

    async def get_model(self, key: str, cls: type[T]) -> T | None:
        """Return a ``cls`` instance stored at ``key`` if present and fresh."""
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, data = entry
        if self._clock() >= expires_at:
            self._store.pop(key, None)
            return None
        return cast(T, cls.model_validate_json(data))

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def close(self) -> None:
        """Clear all entries."""
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


__all__ = ["ResponseCache", "cache_key"]
