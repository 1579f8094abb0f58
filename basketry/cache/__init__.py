"""
Cache — read-through TTL caching for slow-changing payment data.

    from basketry import cache as C

    methods = C.cache(lambda _: "methods", fetch).tier(C.TTLTier(ttl=timedelta(minutes=5))).build()
    result = await methods.get(None)
    await methods.invalidate(None)
"""

from basketry.cache._types import (
    Tier,
    TTLTier,
    CacheResult,
)
from basketry.cache._executor import cache, Cache, CacheExecutor

__all__ = (
    "Tier",
    "TTLTier",
    "CacheResult",
    "cache",
    "Cache",
    "CacheExecutor",
)
