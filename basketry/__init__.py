"""
basketry — basket and checkout transaction engine.

    from basketry import CheckoutEngine, EngineConfig, GraphQLGateway

    config = EngineConfig.from_env()
    async with GraphQLGateway(config=config) as gateway:
        engine = CheckoutEngine(gateway, config)

        match await engine.basket.add_item("42", "course"):
            case Ok(basket): ...
            case Error(err): ...

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_123")

Modules:
    pricing   — basket money invariants (pure)
    store     — the session's basket snapshot + mutation lock
    basket    — serialized basket mutations
    checkout  — placement, confirmation state machine, orders, wallet
    gateway   — backend protocol + GraphQL/httpx adapter
    wire      — pydantic payload models
    cache     — read-through TTL cache
"""

from basketry._types import (
    Result,
    Ok,
    Error,
    Pence,
)
from basketry.model import (
    Basket,
    BasketItem,
    CourseRef,
    Address,
    PaymentMethod,
    Order,
    OrderPage,
    ErrorCode,
    FieldError,
    MutationError,
    OperationResult,
    PaymentState,
    PaymentOutcome,
)
from basketry.config import EngineConfig
from basketry.gateway import BackendGateway, GatewayError, GraphQLGateway, MalformedPayload
from basketry.store import BasketStateStore, BasketView, StoreState
from basketry.basket import MutationCoordinator
from basketry.checkout import PaymentOrchestrator, Wallet
from basketry.engine import CheckoutEngine
from basketry.log import configure_logging

__version__ = "0.1.0"

__all__ = (
    "Result",
    "Ok",
    "Error",
    "Pence",
    "Basket",
    "BasketItem",
    "CourseRef",
    "Address",
    "PaymentMethod",
    "Order",
    "OrderPage",
    "ErrorCode",
    "FieldError",
    "MutationError",
    "OperationResult",
    "PaymentState",
    "PaymentOutcome",
    "EngineConfig",
    "BackendGateway",
    "GatewayError",
    "GraphQLGateway",
    "MalformedPayload",
    "BasketStateStore",
    "BasketView",
    "StoreState",
    "MutationCoordinator",
    "PaymentOrchestrator",
    "Wallet",
    "CheckoutEngine",
    "configure_logging",
)
