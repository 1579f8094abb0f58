"""
Store types.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
from typing import Protocol

from basketry.model import Basket

# ═══════════════════════════════════════════════════════════════════════════════
# Store State
# ═══════════════════════════════════════════════════════════════════════════════


class StoreState(Enum):
    """
    Load state of the basket snapshot.

    Lifecycle:
        UNINITIALIZED → LOADING → READY → LOADING → READY ...
                        LOADING → ERROR → LOADING (retry)
    """

    UNINITIALIZED = auto()
    LOADING = auto()
    READY = auto()
    ERROR = auto()


type Listener = Callable[[Basket | None], None]
type Unsubscribe = Callable[[], None]


# ═══════════════════════════════════════════════════════════════════════════════
# Read-only View
# ═══════════════════════════════════════════════════════════════════════════════


class BasketView(Protocol):
    """Read side of the basket store."""

    def get(self) -> Basket | None: ...

    @property
    def state(self) -> StoreState: ...

    @property
    def loading(self) -> bool: ...

    @property
    def last_error(self) -> str | None: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...


__all__ = ("StoreState", "Listener", "Unsubscribe", "BasketView")
