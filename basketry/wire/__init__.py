"""
Wire — pydantic models for the GraphQL payloads.

Each model decodes camelCase JSON and converts with to_domain():

    payload = PlaceOrderPayloadWire.model_validate(data["placeOrder"])
    response = payload.to_domain()
"""

from basketry.wire._types import ToDomain, FromDomain, WireModel
from basketry.wire._basket import (
    CourseWire,
    BasketItemWire,
    CreditItemWire,
    FeeItemWire,
    BasketWire,
)
from basketry.wire._checkout import (
    AddressWire,
    FieldErrorWire,
    MutationPayloadWire,
    PaymentMethodWire,
    OrderItemWire,
    OrderWire,
    OrderPageWire,
    NextActionWire,
    PlaceOrderPayloadWire,
    PlaceOrderInputWire,
)

__all__ = (
    "ToDomain",
    "FromDomain",
    "WireModel",
    "CourseWire",
    "BasketItemWire",
    "CreditItemWire",
    "FeeItemWire",
    "BasketWire",
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
