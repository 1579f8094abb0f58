"""
Gateway contract — the network boundary the engine drives.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Protocol

from kungfu import Result

from basketry._types import Pence
from basketry.model import (
    Address,
    Basket,
    MutationResponse,
    Order,
    OrderPage,
    PaymentMethod,
    PlaceOrderInput,
    PlaceOrderResponse,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class GatewayErrorKind(Enum):
    TRANSPORT = auto()
    GRAPHQL = auto()
    EMPTY = auto()


@dataclass(frozen=True, slots=True)
class GatewayError:
    """
    Expected gateway failure.

    TRANSPORT — the request did not complete (connect, timeout, HTTP status)
    GRAPHQL   — the server answered with top-level `errors`
    EMPTY     — the server answered without a value the operation requires
    """

    kind: GatewayErrorKind
    message: str
    cause: Exception | None = None


class MalformedPayload(Exception):
    """Server data did not match the expected schema. A defect, not a failure."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail


type GatewayResult[T] = Result[T, GatewayError]


# ═══════════════════════════════════════════════════════════════════════════════
# Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class BackendGateway(Protocol):
    """
    Async backend operations. Each returns Result[T, GatewayError];
    defects raise MalformedPayload.
    """

    # Payment methods

    async def get_payment_methods(self) -> GatewayResult[tuple[PaymentMethod, ...]]: ...

    async def get_stripe_publishable_key(self) -> GatewayResult[str]: ...

    async def create_payment_method(
        self,
        provider_token: str,
        billing_address: Address,
        set_as_default: bool = False,
    ) -> GatewayResult[PaymentMethod]: ...

    async def delete_payment_method(self, payment_method_id: str) -> GatewayResult[bool]: ...

    async def set_default_payment_method(self, payment_method_id: str) -> GatewayResult[bool]: ...

    # Basket

    async def get_basket(self) -> GatewayResult[Basket | None]: ...

    async def init_basket(self) -> GatewayResult[MutationResponse]: ...

    async def add_item(
        self,
        item_id: str,
        item_type: str,
        pay_deposit: bool | None = None,
        assign_to_user_id: str | None = None,
        charge_from_date: datetime | None = None,
    ) -> GatewayResult[MutationResponse]: ...

    async def remove_item(self, item_id: str, item_type: str) -> GatewayResult[MutationResponse]: ...

    async def use_credit_for_basket(self, use_credit: bool) -> GatewayResult[MutationResponse]: ...

    async def apply_promo_code(self, code: str) -> GatewayResult[MutationResponse]: ...

    async def remove_promo_code(self) -> GatewayResult[MutationResponse]: ...

    async def destroy_basket(self) -> GatewayResult[bool]: ...

    # Orders

    async def place_order(self, data: PlaceOrderInput) -> GatewayResult[PlaceOrderResponse | None]: ...

    async def update_payment_intent(self, payment_intent_id: str) -> GatewayResult[bool]: ...

    async def get_order(self, order_id: str) -> GatewayResult[Order | None]: ...

    async def get_order_history(self, limit: int = 20, offset: int = 0) -> GatewayResult[OrderPage]: ...

    async def cancel_order(self, order_id: str) -> GatewayResult[bool]: ...

    async def process_refund(
        self,
        order_id: str,
        amount: Pence,
        reason: str | None = None,
    ) -> GatewayResult[bool]: ...


__all__ = (
    "GatewayErrorKind",
    "GatewayError",
    "MalformedPayload",
    "GatewayResult",
    "BackendGateway",
)
