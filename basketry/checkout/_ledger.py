"""
Intent ledger — at-most-once confirmation per payment intent.

    no record ──run()──► PENDING ──ok──► CONFIRMED (kept, answers True forever)
                                 └─not ok / raised──► (deleted, retry allowed)

A second run() for a PENDING intent waits for the first one and reports
its result instead of calling the backend again.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, auto

import structlog

logger = structlog.get_logger(__name__)


class IntentState(Enum):
    PENDING = auto()
    CONFIRMED = auto()


@dataclass
class _IntentRecord:
    """Internal mutable record."""

    intent_id: str
    state: IntentState = IntentState.PENDING
    done: asyncio.Event = field(default_factory=asyncio.Event)


class IntentLedger:
    """
    In-memory, per-session ledger.

    Note: not shared across processes; the backend's own idempotency on
    updatePaymentIntent covers that.
    """

    def __init__(self) -> None:
        self._records: dict[str, _IntentRecord] = {}
        self._lock = asyncio.Lock()

    def is_confirmed(self, intent_id: str) -> bool:
        record = self._records.get(intent_id)
        return record is not None and record.state is IntentState.CONFIRMED

    def is_pending(self, intent_id: str) -> bool:
        record = self._records.get(intent_id)
        return record is not None and record.state is IntentState.PENDING

    async def run(self, intent_id: str, confirm: Callable[[], Awaitable[bool]]) -> bool:
        """
        Confirm intent_id at most once.

        Returns True if the intent is (now or already) confirmed.
        """
        async with self._lock:
            record = self._records.get(intent_id)
            owner = record is None
            if record is None:
                record = _IntentRecord(intent_id)
                self._records[intent_id] = record

        if not owner:
            if record.state is IntentState.CONFIRMED:
                return True
            logger.debug("Waiting for in-flight confirmation", intent_id=intent_id)
            await record.done.wait()
            return record.state is IntentState.CONFIRMED

        try:
            confirmed = await confirm()
        except BaseException:
            await self._settle(record, confirmed=False)
            raise

        await self._settle(record, confirmed=confirmed)
        return confirmed

    async def _settle(self, record: _IntentRecord, *, confirmed: bool) -> None:
        async with self._lock:
            if confirmed:
                record.state = IntentState.CONFIRMED
            else:
                self._records.pop(record.intent_id, None)
            record.done.set()

    def clear(self) -> None:
        """Forget settled records. In-flight ones finish normally."""
        for intent_id, record in tuple(self._records.items()):
            if record.state is IntentState.CONFIRMED:
                del self._records[intent_id]


__all__ = ("IntentState", "IntentLedger")
