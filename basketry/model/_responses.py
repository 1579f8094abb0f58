"""
Backend response records — what the gateway hands to the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from basketry._types import Pence
from basketry.model._basket import Basket
from basketry.model._checkout import Address, Order
from basketry.model._results import FieldError


@dataclass(frozen=True, slots=True)
class MutationResponse:
    """
    Basket mutation payload.

    Note: the server sends a basket even when it rejects the mutation.
    That basket is not committed locally; errors win.
    """

    basket: Basket | None
    errors: tuple[FieldError, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str | None:
        return self.errors[0].message if self.errors else None

    @property
    def error_code(self) -> str | None:
        return self.errors[0].path if self.errors else None


@dataclass(frozen=True, slots=True)
class NextAction:
    """Out-of-band step the payment provider asks for (3-D Secure)."""

    type: str
    client_secret: str | None = None

    @property
    def requires_action(self) -> bool:
        return self.type == "requires_action"


@dataclass(frozen=True, slots=True)
class PlaceOrderResponse:
    order: Order | None = None
    next_action: NextAction | None = None
    payment_transaction_status: str | None = None
    errors: tuple[FieldError, ...] = ()


@dataclass(frozen=True, slots=True)
class PlaceOrderInput:
    """Placement request. amount is the basket's charge_total in pence."""

    amount: Pence
    payment_method_id: str
    payment_method_type: str = "card"
    currency: str = "gbp"
    billing_address: Address | None = None
    line_item_info: dict[str, Any] = field(default_factory=dict)


__all__ = (
    "MutationResponse",
    "NextAction",
    "PlaceOrderResponse",
    "PlaceOrderInput",
)
