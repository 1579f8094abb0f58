"""
Checkout payloads — payment methods, orders, placement.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from basketry.model import (
    Address,
    FieldError,
    MutationResponse,
    NextAction,
    Order,
    OrderItem,
    OrderPage,
    PaymentMethod,
    PlaceOrderInput,
    PlaceOrderResponse,
)
from basketry.wire._basket import BasketWire
from basketry.wire._types import WireModel

# ═══════════════════════════════════════════════════════════════════════════════
# Shared
# ═══════════════════════════════════════════════════════════════════════════════


class AddressWire(WireModel):
    line1: str
    city: str
    post_code: str
    id: str | None = None
    name: str | None = None
    line2: str | None = None
    county: str | None = None
    country: str | None = None
    country_code: str = "GB"

    def to_domain(self) -> Address:
        return Address(
            line1=self.line1,
            city=self.city,
            post_code=self.post_code,
            id=self.id,
            name=self.name,
            line2=self.line2,
            county=self.county,
            country=self.country,
            country_code=self.country_code,
        )

    @classmethod
    def from_domain(cls, dom: Address) -> AddressWire:
        return cls(
            line1=dom.line1,
            city=dom.city,
            post_code=dom.post_code,
            name=dom.name,
            line2=dom.line2,
            county=dom.county,
            country=dom.country,
            country_code=dom.country_code,
        )

    def to_input(self) -> dict[str, Any]:
        """AddressInput variables. The server assigns ids."""
        return self.model_dump(by_alias=True, exclude={"id"})


class FieldErrorWire(WireModel):
    """Basket mutations report `path`, placement reports `field`."""

    path: str | None = None
    field: str | None = None
    message: str = "Unknown error"

    def to_domain(self) -> FieldError:
        return FieldError(path=self.path or self.field or "", message=self.message)


class MutationPayloadWire(WireModel):
    basket: BasketWire | None = None
    errors: list[FieldErrorWire] = []

    def to_domain(self) -> MutationResponse:
        return MutationResponse(
            basket=self.basket.to_domain() if self.basket else None,
            errors=tuple(e.to_domain() for e in self.errors),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Methods
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethodWire(WireModel):
    id: str
    type: str = "card"
    last4: str | None = None
    brand: str | None = None
    expiry_month: str | None = None
    expiry_year: str | None = None
    is_default: bool = False
    billing_address: AddressWire | None = None
    created_at: datetime | None = None

    def to_domain(self) -> PaymentMethod:
        return PaymentMethod(
            id=self.id,
            type=self.type,
            last4=self.last4,
            brand=self.brand,
            expiry_month=self.expiry_month,
            expiry_year=self.expiry_year,
            is_default=self.is_default,
            billing_address=self.billing_address.to_domain() if self.billing_address else None,
            created_at=self.created_at,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderItemWire(WireModel):
    id: str
    item_id: str
    item_type: str
    item_name: str
    price: int
    total_price: int
    discount_value: int | None = None
    promo_code_discount_value: int | None = None
    assign_to_user_id: str | None = None
    assign_to_user_name: str | None = None
    charge_from_date: datetime | None = None
    extra_info: dict[str, Any] | None = None
    created_at: datetime | None = None

    def to_domain(self) -> OrderItem:
        return OrderItem(
            id=self.id,
            item_id=self.item_id,
            item_type=self.item_type,
            item_name=self.item_name,
            price=self.price,
            total_price=self.total_price,
            discount_value=self.discount_value,
            promo_code_discount_value=self.promo_code_discount_value,
            assign_to_user_id=self.assign_to_user_id,
            assign_to_user_name=self.assign_to_user_name,
            charge_from_date=self.charge_from_date,
            extra_info=self.extra_info,
            created_at=self.created_at,
        )


class OrderWire(WireModel):
    id: str
    user_id: str
    items: list[OrderItemWire] = []
    sub_total: int = 0
    discount_total: int = 0
    promo_code_discount_value: int = 0
    credit_total: int = 0
    tax: int = 0
    total: int = 0
    charge_total: int = 0
    pay_later: int = 0
    status: str = "pending"
    payment_method_id: str | None = None
    payment_method_type: str = "card"
    payment_intent_id: str | None = None
    payment_transaction_status: str | None = None
    billing_address: AddressWire | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            user_id=self.user_id,
            items=tuple(i.to_domain() for i in self.items),
            sub_total=self.sub_total,
            discount_total=self.discount_total,
            promo_code_discount_value=self.promo_code_discount_value,
            credit_total=self.credit_total,
            tax=self.tax,
            total=self.total,
            charge_total=self.charge_total,
            pay_later=self.pay_later,
            status=self.status,
            payment_method_id=self.payment_method_id,
            payment_method_type=self.payment_method_type,
            payment_intent_id=self.payment_intent_id,
            payment_transaction_status=self.payment_transaction_status,
            billing_address=self.billing_address.to_domain() if self.billing_address else None,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class OrderPageWire(WireModel):
    orders: list[OrderWire] = []
    total_count: int | None = None

    def to_domain(self) -> OrderPage:
        orders = tuple(o.to_domain() for o in self.orders)
        total = self.total_count if self.total_count is not None else len(orders)
        return OrderPage(orders=orders, total_count=total)


# ═══════════════════════════════════════════════════════════════════════════════
# Placement
# ═══════════════════════════════════════════════════════════════════════════════


class NextActionWire(WireModel):
    type: str = "none"
    client_secret: str | None = None

    def to_domain(self) -> NextAction:
        return NextAction(type=self.type, client_secret=self.client_secret)


class PlaceOrderPayloadWire(WireModel):
    order: OrderWire | None = None
    next_action: NextActionWire | None = None
    payment_transaction_status: str | None = None
    errors: list[FieldErrorWire] = []

    def to_domain(self) -> PlaceOrderResponse:
        return PlaceOrderResponse(
            order=self.order.to_domain() if self.order else None,
            next_action=self.next_action.to_domain() if self.next_action else None,
            payment_transaction_status=self.payment_transaction_status,
            errors=tuple(e.to_domain() for e in self.errors),
        )


class PlaceOrderInputWire(WireModel):
    amount: int
    currency: str
    payment_method: str
    payment_method_type: str
    line_item_info: dict[str, Any] = {}
    billing_address: AddressWire | None = None

    @classmethod
    def from_domain(cls, dom: PlaceOrderInput) -> PlaceOrderInputWire:
        return cls(
            amount=dom.amount,
            currency=dom.currency,
            payment_method=dom.payment_method_id,
            payment_method_type=dom.payment_method_type,
            line_item_info=dict(dom.line_item_info),
            billing_address=AddressWire.from_domain(dom.billing_address) if dom.billing_address else None,
        )

    def to_variables(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude={"billing_address"})
        if self.billing_address is not None:
            data["billingAddress"] = self.billing_address.to_input()
        return data


__all__ = (
    "AddressWire",
    "FieldErrorWire",
    "MutationPayloadWire",
    "PaymentMethodWire",
    "OrderItemWire",
    "OrderWire",
    "OrderPageWire",
    "NextActionWire",
    "PlaceOrderPayloadWire",
    "PlaceOrderInputWire",
)
