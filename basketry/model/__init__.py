"""
Model — immutable domain records.

    from basketry import model as M

    basket = M.Basket(id="b1", items=(...), sub_total=4500, total=4500, charge_total=4500)
"""

from basketry.model._basket import (
    CourseRef,
    BasketItem,
    CreditItem,
    FeeItem,
    Basket,
)
from basketry.model._checkout import (
    Address,
    PaymentMethod,
    OrderItem,
    Order,
    OrderPage,
)
from basketry.model._responses import (
    MutationResponse,
    NextAction,
    PlaceOrderResponse,
    PlaceOrderInput,
)
from basketry.model._results import (
    ErrorCode,
    FieldError,
    MutationError,
    OperationResult,
    PaymentState,
    PaymentOutcome,
)

__all__ = (
    # Basket
    "CourseRef",
    "BasketItem",
    "CreditItem",
    "FeeItem",
    "Basket",
    # Checkout
    "Address",
    "PaymentMethod",
    "OrderItem",
    "Order",
    "OrderPage",
    # Responses
    "MutationResponse",
    "NextAction",
    "PlaceOrderResponse",
    "PlaceOrderInput",
    # Results
    "ErrorCode",
    "FieldError",
    "MutationError",
    "OperationResult",
    "PaymentState",
    "PaymentOutcome",
)
