"""
Mutation lock — linearizes every write to one basket.

Two layers:
    lock   — FIFO asyncio.Lock; one gateway call in flight per basket
    hold   — set by checkout between placement and a terminal payment
             state; mutations observe it and answer BUSY
"""

from __future__ import annotations

import asyncio
from types import TracebackType

import structlog

logger = structlog.get_logger(__name__)


class MutationLock:
    """
    Per-basket mutex shared by the mutation coordinator and checkout.

    Example:
        if lock.held_by_checkout:
            return busy()
        async with lock:
            ...
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._held_by_checkout = False

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def held_by_checkout(self) -> bool:
        return self._held_by_checkout

    async def __aenter__(self) -> MutationLock:
        await self._lock.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._lock.release()

    def hold(self) -> None:
        """Mark the basket as owned by an in-progress checkout."""
        if not self._held_by_checkout:
            logger.debug("Basket held by checkout")
        self._held_by_checkout = True

    def release(self) -> None:
        if self._held_by_checkout:
            logger.debug("Basket released by checkout")
        self._held_by_checkout = False


__all__ = ("MutationLock",)
