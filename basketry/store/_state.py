"""
Basket state store — the single current snapshot for the session.

Note: only the mutation coordinator and checkout's clear-on-success write
here. Everything else reads through BasketView.
"""

from __future__ import annotations

import structlog
from kungfu import Result, Ok, Error

from basketry.model import Basket
from basketry.pricing import InvariantViolation, validate
from basketry.store._lock import MutationLock
from basketry.store._types import Listener, StoreState, Unsubscribe

logger = structlog.get_logger(__name__)


class BasketStateStore:
    """
    Holds exactly one Basket | None plus load state.

    Example:
        store = BasketStateStore()
        unsubscribe = store.subscribe(lambda b: print(b and b.total))
        store.replace(basket)
    """

    def __init__(self) -> None:
        self._basket: Basket | None = None
        self._state = StoreState.UNINITIALIZED
        self._last_error: str | None = None
        self._listeners: list[Listener] = []
        self.lock = MutationLock()

    # ───────────────────────────────────────────────────────────────────────────
    # Read
    # ───────────────────────────────────────────────────────────────────────────

    def get(self) -> Basket | None:
        return self._basket

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is StoreState.LOADING

    @property
    def last_error(self) -> str | None:
        return self._last_error

    # ───────────────────────────────────────────────────────────────────────────
    # Write
    # ───────────────────────────────────────────────────────────────────────────

    def begin_loading(self) -> None:
        self._state = StoreState.LOADING

    def fail(self, message: str) -> None:
        """LOADING → ERROR. Snapshot is kept; ERROR is retryable."""
        self._state = StoreState.ERROR
        self._last_error = message
        logger.warning("Basket load failed", error=message)

    def replace(self, basket: Basket) -> Result[Basket, tuple[InvariantViolation, ...]]:
        """
        Swap in a server snapshot, then check its money invariants.

        The swap happens even when validation fails: the server is
        authoritative, the violation is reported for the caller to resync.
        """
        self._basket = basket
        self._state = StoreState.READY
        self._last_error = None
        self._notify(basket)

        result = validate(basket)
        match result:
            case Ok(_):
                pass
            case Error(found):
                logger.warning(
                    "Basket invariant violated",
                    basket_id=basket.id,
                    violations=[v.describe() for v in found],
                )
        return result

    def reset(self) -> None:
        """
        Forget the basket (logout, start over, order placed).

        The checkout hold is not touched; only checkout releases it.
        """
        had_basket = self._basket is not None
        self._basket = None
        self._state = StoreState.UNINITIALIZED
        self._last_error = None
        if had_basket:
            self._notify(None)

    # ───────────────────────────────────────────────────────────────────────────
    # Subscription
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, basket: Basket | None) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(basket)
            except Exception:
                logger.exception("Basket listener failed")


__all__ = ("BasketStateStore",)
