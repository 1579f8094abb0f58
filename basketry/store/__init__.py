"""
Store — the session's basket snapshot and its mutation lock.

    from basketry import store as S

    store = S.BasketStateStore()
    store.replace(basket)          # Ok(basket) | Error(violations)
    store.get()                    # Basket | None
"""

from basketry.store._types import StoreState, Listener, Unsubscribe, BasketView
from basketry.store._lock import MutationLock
from basketry.store._state import BasketStateStore

__all__ = (
    "StoreState",
    "Listener",
    "Unsubscribe",
    "BasketView",
    "MutationLock",
    "BasketStateStore",
)
