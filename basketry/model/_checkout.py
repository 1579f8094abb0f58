"""
Checkout model — addresses, payment instruments, orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from basketry._types import Pence


@dataclass(frozen=True, slots=True)
class Address:
    line1: str
    city: str
    post_code: str
    id: str | None = None
    name: str | None = None
    line2: str | None = None
    county: str | None = None
    country: str | None = None
    country_code: str = "GB"

    @property
    def short_display(self) -> str:
        return f"{self.line1}, {self.city} {self.post_code}"


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    """Saved payment instrument. Card fields are masked by the backend."""

    id: str
    type: str = "card"
    last4: str | None = None
    brand: str | None = None
    expiry_month: str | None = None
    expiry_year: str | None = None
    is_default: bool = False
    billing_address: Address | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class OrderItem:
    id: str
    item_id: str
    item_type: str
    item_name: str
    price: Pence
    total_price: Pence
    discount_value: Pence | None = None
    promo_code_discount_value: Pence | None = None
    assign_to_user_id: str | None = None
    assign_to_user_name: str | None = None
    charge_from_date: datetime | None = None
    extra_info: dict[str, Any] | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Order:
    """
    Immutable record of a placed order.

    Note: totals are frozen at placement time and never recomputed locally.
    """

    id: str
    user_id: str
    items: tuple[OrderItem, ...] = ()
    sub_total: Pence = 0
    discount_total: Pence = 0
    promo_code_discount_value: Pence = 0
    credit_total: Pence = 0
    tax: Pence = 0
    total: Pence = 0
    charge_total: Pence = 0
    pay_later: Pence = 0
    status: str = "pending"
    payment_method_id: str | None = None
    payment_method_type: str = "card"
    payment_intent_id: str | None = None
    payment_transaction_status: str | None = None
    billing_address: Address | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def requires_additional_payment(self) -> bool:
        return self.pay_later > 0


@dataclass(frozen=True, slots=True)
class OrderPage:
    orders: tuple[Order, ...] = field(default_factory=tuple)
    total_count: int = 0


__all__ = (
    "Address",
    "PaymentMethod",
    "OrderItem",
    "Order",
    "OrderPage",
)
