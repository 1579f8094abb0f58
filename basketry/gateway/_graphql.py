"""
GraphQL gateway over httpx.

Expected failures come back as Error(GatewayError); payloads that do not
match the wire models raise MalformedPayload.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Any

import httpx
import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error
from pydantic import BaseModel, ValidationError

from basketry._types import Pence
from basketry.config import EngineConfig
from basketry.gateway import _documents as D
from basketry.gateway._types import (
    GatewayError,
    GatewayErrorKind,
    GatewayResult,
    MalformedPayload,
)
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
from basketry.wire import (
    AddressWire,
    BasketWire,
    MutationPayloadWire,
    OrderPageWire,
    OrderWire,
    PaymentMethodWire,
    PlaceOrderInputWire,
    PlaceOrderPayloadWire,
)

logger = structlog.get_logger(__name__)


def _transport_error(e: Exception) -> GatewayError:
    return GatewayError(GatewayErrorKind.TRANSPORT, str(e) or type(e).__name__, e)


def _decode[M: BaseModel](operation: str, model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedPayload(operation, str(e)) from e


def _flag(operation: str, data: dict[str, Any]) -> bool:
    value = data.get(operation)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedPayload(operation, f"expected boolean, got {type(value).__name__}")
    return value


def _epoch_millis(value: datetime | None) -> float | None:
    return value.timestamp() * 1000 if value is not None else None


class GraphQLGateway:
    """
    BackendGateway over a GraphQL HTTP endpoint.

    Example:
        async with GraphQLGateway(config=EngineConfig().with_endpoint(url, token=jwt)) as gateway:
            result = await gateway.get_basket()
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: EngineConfig = EngineConfig(),
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.request_timeout.total_seconds(),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GraphQLGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ───────────────────────────────────────────────────────────────────────────
    # Transport
    # ───────────────────────────────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    async def _post(self, document: str, variables: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(
            self._config.endpoint,
            json={"query": document, "variables": variables},
            headers=self._headers(),
        )
        response.raise_for_status()
        return response.json()

    async def _execute(
        self,
        operation: str,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> GatewayResult[dict[str, Any]]:
        """POST one document. Ok(data) or Error(TRANSPORT | GRAPHQL)."""
        result = await L.catching_async(
            lambda: self._post(document, variables or {}),
            on_error=_transport_error,
        )
        match result:
            case Error(e):
                logger.warning("GraphQL transport failed", operation=operation, error=e.message)
                return Error(e)
            case Ok(body):
                pass

        if not isinstance(body, dict):
            raise MalformedPayload(operation, "response body is not an object")

        if errors := body.get("errors"):
            message = "; ".join(str(err.get("message", err)) for err in errors if isinstance(err, dict))
            logger.warning("GraphQL errors", operation=operation, error=message)
            return Error(GatewayError(GatewayErrorKind.GRAPHQL, message or "GraphQL error"))

        data = body.get("data")
        return Ok(data if isinstance(data, dict) else {})

    async def _query[T](
        self,
        operation: str,
        document: str,
        variables: dict[str, Any] | None,
        decode: Callable[[dict[str, Any]], T],
    ) -> GatewayResult[T]:
        match await self._execute(operation, document, variables):
            case Ok(data):
                return Ok(decode(data))
            case Error(e):
                return Error(e)

    def _mutation(self, operation: str, data: dict[str, Any]) -> MutationResponse:
        payload = data.get(operation)
        if payload is None:
            raise MalformedPayload(operation, "missing payload")
        return _decode(operation, MutationPayloadWire, payload).to_domain()

    def _basket_as_mutation(self, operation: str, data: dict[str, Any]) -> MutationResponse:
        payload = data.get(operation)
        if payload is None:
            raise MalformedPayload(operation, "missing basket")
        return MutationResponse(basket=_decode(operation, BasketWire, payload).to_domain())

    # ───────────────────────────────────────────────────────────────────────────
    # Payment Methods
    # ───────────────────────────────────────────────────────────────────────────

    async def get_payment_methods(self) -> GatewayResult[tuple[PaymentMethod, ...]]:
        def decode(data: dict[str, Any]) -> tuple[PaymentMethod, ...]:
            payload = data.get("getPaymentMethods") or {}
            raw = payload.get("paymentMethods") or []
            return tuple(_decode("getPaymentMethods", PaymentMethodWire, m).to_domain() for m in raw)

        return await self._query("getPaymentMethods", D.GET_PAYMENT_METHODS, None, decode)

    async def get_stripe_publishable_key(self) -> GatewayResult[str]:
        match await self._execute("getStripe", D.GET_PUBLISHABLE_KEY):
            case Ok(data):
                key = data.get("getStripe")
                if not key:
                    return Error(GatewayError(GatewayErrorKind.EMPTY, "No publishable key returned"))
                return Ok(str(key))
            case Error(e):
                return Error(e)

    async def create_payment_method(
        self,
        provider_token: str,
        billing_address: Address,
        set_as_default: bool = False,
    ) -> GatewayResult[PaymentMethod]:
        variables = {
            "stripePaymentMethodId": provider_token,
            "billingAddress": AddressWire.from_domain(billing_address).to_input(),
            "setAsDefault": set_as_default,
        }
        match await self._execute("createPaymentMethod", D.CREATE_PAYMENT_METHOD, variables):
            case Ok(data):
                payload = data.get("createPaymentMethod")
                if payload is None:
                    return Error(GatewayError(GatewayErrorKind.EMPTY, "No payment method returned"))
                return Ok(_decode("createPaymentMethod", PaymentMethodWire, payload).to_domain())
            case Error(e):
                return Error(e)

    async def delete_payment_method(self, payment_method_id: str) -> GatewayResult[bool]:
        return await self._query(
            "deletePaymentMethod",
            D.DELETE_PAYMENT_METHOD,
            {"paymentMethodId": payment_method_id},
            lambda data: _flag("deletePaymentMethod", data),
        )

    async def set_default_payment_method(self, payment_method_id: str) -> GatewayResult[bool]:
        return await self._query(
            "setDefaultPaymentMethod",
            D.SET_DEFAULT_PAYMENT_METHOD,
            {"paymentMethodId": payment_method_id},
            lambda data: _flag("setDefaultPaymentMethod", data),
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Basket
    # ───────────────────────────────────────────────────────────────────────────

    async def get_basket(self) -> GatewayResult[Basket | None]:
        def decode(data: dict[str, Any]) -> Basket | None:
            payload = data.get("getBasket")
            if not payload or payload.get("basket") is None:
                return None
            return _decode("getBasket", BasketWire, payload["basket"]).to_domain()

        return await self._query("getBasket", D.GET_BASKET, None, decode)

    async def init_basket(self) -> GatewayResult[MutationResponse]:
        return await self._query(
            "initBasket", D.INIT_BASKET, None, lambda data: self._mutation("initBasket", data)
        )

    async def add_item(
        self,
        item_id: str,
        item_type: str,
        pay_deposit: bool | None = None,
        assign_to_user_id: str | None = None,
        charge_from_date: datetime | None = None,
    ) -> GatewayResult[MutationResponse]:
        variables = {
            "itemId": item_id,
            "itemType": item_type,
            "payDeposit": pay_deposit,
            "assignToUserId": assign_to_user_id,
            "chargeFromDate": _epoch_millis(charge_from_date),
        }
        return await self._query(
            "addItem", D.ADD_ITEM, variables, lambda data: self._mutation("addItem", data)
        )

    async def remove_item(self, item_id: str, item_type: str) -> GatewayResult[MutationResponse]:
        return await self._query(
            "removeItem",
            D.REMOVE_ITEM,
            {"itemId": item_id, "itemType": item_type},
            lambda data: self._mutation("removeItem", data),
        )

    async def use_credit_for_basket(self, use_credit: bool) -> GatewayResult[MutationResponse]:
        return await self._query(
            "useCreditForBasket",
            D.USE_CREDIT,
            {"useCredit": use_credit},
            lambda data: self._mutation("useCreditForBasket", data),
        )

    async def apply_promo_code(self, code: str) -> GatewayResult[MutationResponse]:
        return await self._query(
            "applyPromoCode",
            D.APPLY_PROMO_CODE,
            {"code": code},
            lambda data: self._basket_as_mutation("applyPromoCode", data),
        )

    async def remove_promo_code(self) -> GatewayResult[MutationResponse]:
        return await self._query(
            "removePromoCode",
            D.REMOVE_PROMO_CODE,
            None,
            lambda data: self._basket_as_mutation("removePromoCode", data),
        )

    async def destroy_basket(self) -> GatewayResult[bool]:
        return await self._query(
            "destroyBasket", D.DESTROY_BASKET, None, lambda data: _flag("destroyBasket", data)
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def place_order(self, data: PlaceOrderInput) -> GatewayResult[PlaceOrderResponse | None]:
        variables = {"data": PlaceOrderInputWire.from_domain(data).to_variables()}

        def decode(payload: dict[str, Any]) -> PlaceOrderResponse | None:
            raw = payload.get("placeOrder")
            if raw is None:
                return None
            return _decode("placeOrder", PlaceOrderPayloadWire, raw).to_domain()

        return await self._query("placeOrder", D.PLACE_ORDER, variables, decode)

    async def update_payment_intent(self, payment_intent_id: str) -> GatewayResult[bool]:
        return await self._query(
            "updatePaymentIntent",
            D.UPDATE_PAYMENT_INTENT,
            {"id": payment_intent_id},
            lambda data: _flag("updatePaymentIntent", data),
        )

    async def get_order(self, order_id: str) -> GatewayResult[Order | None]:
        def decode(data: dict[str, Any]) -> Order | None:
            raw = data.get("getOrder")
            return _decode("getOrder", OrderWire, raw).to_domain() if raw is not None else None

        return await self._query("getOrder", D.GET_ORDER, {"orderId": order_id}, decode)

    async def get_order_history(self, limit: int = 20, offset: int = 0) -> GatewayResult[OrderPage]:
        def decode(data: dict[str, Any]) -> OrderPage:
            raw = data.get("getOrderHistory")
            if raw is None:
                return OrderPage()
            return _decode("getOrderHistory", OrderPageWire, raw).to_domain()

        return await self._query(
            "getOrderHistory",
            D.GET_ORDER_HISTORY,
            {"limit": limit, "offset": offset},
            decode,
        )

    async def cancel_order(self, order_id: str) -> GatewayResult[bool]:
        return await self._query(
            "cancelOrder",
            D.CANCEL_ORDER,
            {"orderId": order_id},
            lambda data: _flag("cancelOrder", data),
        )

    async def process_refund(
        self,
        order_id: str,
        amount: Pence,
        reason: str | None = None,
    ) -> GatewayResult[bool]:
        return await self._query(
            "processRefund",
            D.PROCESS_REFUND,
            {"orderId": order_id, "amount": amount, "reason": reason},
            lambda data: _flag("processRefund", data),
        )


__all__ = ("GraphQLGateway",)
