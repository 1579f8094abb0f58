"""
Cache types.
"""

from __future__ import annotations

import fnmatch
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Tier[T](Protocol):
    """
    Cache tier protocol.

    Implement this to keep payment data somewhere other than process memory.
    """

    @property
    def name(self) -> str: ...

    async def get(self, key: str) -> T | None:
        """Get value. Returns None on miss or expiry."""
        ...

    async def set(self, key: str, value: T) -> None: ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob pattern. Returns count."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# TTL Tier: In-Memory LRU with Expiry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Entry[T]:
    value: T
    expires_at: float | None


class TTLTier[T]:
    """
    In-memory LRU tier whose entries expire after ttl.

    Example:
        tier = TTLTier[list[PaymentMethod]](ttl=timedelta(minutes=5))
    """

    def __init__(
        self,
        ttl: timedelta | None = None,
        max_size: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl.total_seconds() if ttl is not None else None
        self._max_size = max_size
        self._clock = clock
        self._cache: dict[str, _Entry[T]] = {}

    @property
    def name(self) -> str:
        return "ttl"

    def _expired(self, entry: _Entry[T]) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    async def get(self, key: str) -> T | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._cache[key]
            return None
        # Move to end (most recent)
        self._cache[key] = self._cache.pop(key)
        return entry.value

    async def set(self, key: str, value: T) -> None:
        if key in self._cache:
            del self._cache[key]
        elif len(self._cache) >= self._max_size:
            oldest = next(iter(self._cache))
            del self._cache[oldest]

        expires_at = self._clock() + self._ttl if self._ttl is not None else None
        self._cache[key] = _Entry(value, expires_at)

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    async def delete_pattern(self, pattern: str) -> int:
        keys = [k for k in self._cache if fnmatch.fnmatch(k, pattern)]
        for key in keys:
            del self._cache[key]
        return len(keys)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Cache read with hit metadata."""

    value: T
    hit: bool
    tier: str | None


__all__ = (
    "Tier",
    "TTLTier",
    "CacheResult",
)
