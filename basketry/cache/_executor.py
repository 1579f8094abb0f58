"""
Cache executor — read-through over tiers.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from kungfu import LazyCoroResult, Result, Ok, Error

from basketry.cache._types import CacheResult, Tier

logger = structlog.get_logger(__name__)

type KeyFn[K] = Callable[[K], str]
type FetchFn[K, T, E] = Callable[[K], Awaitable[Result[T, E]]]


@dataclass(slots=True, frozen=True)
class CacheExecutor[K, T, E]:
    """
    Read-through cache.

    Tries tiers in order, then falls back to fetch. A fetch success
    populates every tier; a fetch error is returned and nothing is stored.

    Example:
        methods = cache(lambda _: "payment_methods", fetch_methods).tier(TTLTier(ttl)).build()
        result = await methods.get(None)
    """

    key_fn: KeyFn[K]
    tiers: tuple[Tier[T], ...]
    fetch: FetchFn[K, T, E]

    def get(self, key: K) -> LazyCoroResult[CacheResult[T], E]:
        cache_key = self.key_fn(key)
        tiers = self.tiers
        fetch_fn = self.fetch

        async def execute() -> Result[CacheResult[T], E]:
            for t in tiers:
                try:
                    value = await t.get(cache_key)
                except Exception:
                    logger.warning("Cache tier read failed", tier=t.name, key=cache_key, exc_info=True)
                    continue
                if value is not None:
                    return Ok(CacheResult(value=value, hit=True, tier=t.name))

            match await fetch_fn(key):
                case Ok(value):
                    await self._populate(cache_key, value)
                    return Ok(CacheResult(value=value, hit=False, tier=None))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    async def put(self, key: K, value: T) -> None:
        await self._populate(self.key_fn(key), value)

    async def invalidate(self, key: K) -> bool:
        cache_key = self.key_fn(key)
        deleted = False
        for t in self.tiers:
            try:
                if await t.delete(cache_key):
                    deleted = True
            except Exception:
                logger.warning("Cache tier delete failed", tier=t.name, key=cache_key, exc_info=True)
        return deleted

    async def invalidate_pattern(self, pattern: str) -> int:
        total = 0
        for t in self.tiers:
            try:
                total += await t.delete_pattern(pattern)
            except Exception:
                logger.warning("Cache tier delete failed", tier=t.name, pattern=pattern, exc_info=True)
        return total

    async def _populate(self, cache_key: str, value: T) -> None:
        for t in self.tiers:
            try:
                await t.set(cache_key, value)
            except Exception:
                logger.warning("Cache tier write failed", tier=t.name, key=cache_key, exc_info=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class Cache[K, T, E]:
    """Fluent cache builder."""

    _key_fn: KeyFn[K]
    _fetch: FetchFn[K, T, E]
    _tiers: tuple[Tier[T], ...]

    def tier(self, t: Tier[T]) -> Cache[K, T, E]:
        return Cache(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _tiers=(*self._tiers, t),
        )

    def build(self) -> CacheExecutor[K, T, E]:
        return CacheExecutor(key_fn=self._key_fn, tiers=self._tiers, fetch=self._fetch)


def cache[K, T, E](key: KeyFn[K], fetch: FetchFn[K, T, E]) -> Cache[K, T, E]:
    """Create a cache builder from a key function and a fetch."""
    return Cache(_key_fn=key, _fetch=fetch, _tiers=())


__all__ = ("Cache", "CacheExecutor", "cache")
