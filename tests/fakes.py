"""In-memory backend used across the test suite."""

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime

from kungfu import Ok, Error

from basketry.gateway import GatewayError, GatewayErrorKind
from basketry.model import (
    Address,
    Basket,
    BasketItem,
    CourseRef,
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

CATALOG: dict[str, tuple[str, int]] = {
    "101": ("Ballet Beginners", 4500),
    "102": ("Jazz Taster", 2500),
    "103": ("Contemporary Term", 5000),
    "104": ("Tap Intermediate", 3000),
}

PROMO_CODES = {"SAVE10": 10}


@dataclass
class _Line:
    course_id: str
    item_type: str
    pay_deposit: bool = False
    assign_to_user_id: str | None = None
    charge_from_date: datetime | None = None


class FakeBackend:
    """
    BackendGateway double.

    Payment method ids steer placement:
        pm_declined → errors (card declined)
        pm_3ds      → requires_action with a client secret
        pm_no_data  → no placeOrder payload
        anything else → paid
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.catalog = dict(CATALOG)
        self.delay = delay
        self.offline = False
        self.lines: list[_Line] | None = None
        self.basket_seq = 0
        self.promo: str | None = None
        self.use_credit = False
        self.credit_available = 0
        self.corrupt_responses = 0
        self.confirm_result = True
        self.calls: list[str] = []
        self.placements: list[PlaceOrderInput] = []
        self.intent_updates: list[str] = []
        self.orders: dict[str, Order] = {}
        self.payment_methods: list[PaymentMethod] = [
            PaymentMethod(id="pm_card", last4="4242", brand="visa"),
            PaymentMethod(id="pm_other", last4="0005", brand="amex", is_default=True),
        ]
        self.publishable_key = "pk_test_123"
        self.in_flight = 0
        self.max_in_flight = 0

    # ───────────────────────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────────────────────

    async def _enter(self, name: str) -> GatewayError | None:
        self.calls.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if self.offline:
            return GatewayError(GatewayErrorKind.TRANSPORT, "Connection refused")
        return None

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def snapshot(self) -> Basket | None:
        if self.lines is None:
            return None

        items = []
        for n, line in enumerate(self.lines):
            name, price = self.catalog[line.course_id]
            items.append(
                BasketItem(
                    id=f"item_{n}",
                    course=CourseRef(id=line.course_id, name=name, type=line.item_type),
                    price=price,
                    total_price=price,
                    pay_deposit=line.pay_deposit,
                    assign_to_user_id=line.assign_to_user_id,
                    charge_from_date=line.charge_from_date,
                )
            )

        sub_total = sum(i.price for i in items)
        promo = sub_total * PROMO_CODES[self.promo] // 100 if self.promo else 0
        credit = min(self.credit_available, sub_total - promo) if self.use_credit else 0
        total = sub_total - promo - credit
        pay_later = min(sum(i.price // 2 for i in items if i.pay_deposit), total)

        basket = Basket(
            id=f"basket_{self.basket_seq}",
            items=tuple(items),
            sub_total=sub_total,
            promo_code_discount_value=promo,
            credit_total=credit,
            total=total,
            charge_total=total - pay_later,
            pay_later=pay_later,
        )
        if self.corrupt_responses > 0:
            self.corrupt_responses -= 1
            basket = replace(basket, total=basket.total + 1)
        return basket

    def _new_basket(self) -> None:
        self.basket_seq += 1
        self.lines = []
        self.promo = None
        self.use_credit = False

    def _reject(self, path: str, message: str) -> MutationResponse:
        return MutationResponse(basket=self.snapshot(), errors=(FieldError(path, message),))

    def _order_from_basket(self, basket: Basket, data: PlaceOrderInput, status: str) -> Order:
        number = len(self.orders) + 1
        order = Order(
            id=f"ord_{number}",
            user_id="user_1",
            items=tuple(
                OrderItem(
                    id=f"oi_{number}_{n}",
                    item_id=i.course.id,
                    item_type=i.course.type or "course",
                    item_name=i.course.name,
                    price=i.price,
                    total_price=i.total_price,
                )
                for n, i in enumerate(basket.items)
            ),
            sub_total=basket.sub_total,
            promo_code_discount_value=basket.promo_code_discount_value,
            credit_total=basket.credit_total,
            total=basket.total,
            charge_total=basket.charge_total,
            pay_later=basket.pay_later,
            status=status,
            payment_method_id=data.payment_method_id,
            payment_method_type=data.payment_method_type,
            payment_intent_id=f"pi_{number}",
            billing_address=data.billing_address,
        )
        self.orders[order.id] = order
        return order

    # ───────────────────────────────────────────────────────────────────────────
    # Basket
    # ───────────────────────────────────────────────────────────────────────────

    async def get_basket(self):
        if err := await self._enter("get_basket"):
            return Error(err)
        return Ok(self.snapshot())

    async def init_basket(self):
        if err := await self._enter("init_basket"):
            return Error(err)
        self._new_basket()
        return Ok(MutationResponse(basket=self.snapshot()))

    async def add_item(self, item_id, item_type, pay_deposit=None, assign_to_user_id=None, charge_from_date=None):
        if err := await self._enter("add_item"):
            return Error(err)
        if self.lines is None:
            self._new_basket()
        if item_id not in self.catalog:
            return Ok(self._reject("itemId", "Course not found"))
        if any(line.course_id == item_id for line in self.lines):
            return Ok(self._reject("itemId", "Course is already in your basket"))
        self.lines.append(
            _Line(item_id, item_type, bool(pay_deposit), assign_to_user_id, charge_from_date)
        )
        return Ok(MutationResponse(basket=self.snapshot()))

    async def remove_item(self, item_id, item_type):
        if err := await self._enter("remove_item"):
            return Error(err)
        if self.lines is None or not any(line.course_id == item_id for line in self.lines):
            return Ok(self._reject("itemId", "Item not in basket"))
        self.lines = [line for line in self.lines if line.course_id != item_id]
        return Ok(MutationResponse(basket=self.snapshot()))

    async def use_credit_for_basket(self, use_credit):
        if err := await self._enter("use_credit_for_basket"):
            return Error(err)
        if use_credit and self.credit_available <= 0:
            return Ok(self._reject("useCredit", "No credit available"))
        self.use_credit = use_credit
        return Ok(MutationResponse(basket=self.snapshot()))

    async def apply_promo_code(self, code):
        if err := await self._enter("apply_promo_code"):
            return Error(err)
        if code not in PROMO_CODES:
            return Error(GatewayError(GatewayErrorKind.GRAPHQL, "Invalid promo code"))
        self.promo = code
        return Ok(MutationResponse(basket=self.snapshot()))

    async def remove_promo_code(self):
        if err := await self._enter("remove_promo_code"):
            return Error(err)
        self.promo = None
        return Ok(MutationResponse(basket=self.snapshot()))

    async def destroy_basket(self):
        if err := await self._enter("destroy_basket"):
            return Error(err)
        self.lines = None
        return Ok(True)

    # ───────────────────────────────────────────────────────────────────────────
    # Payment methods
    # ───────────────────────────────────────────────────────────────────────────

    async def get_payment_methods(self):
        if err := await self._enter("get_payment_methods"):
            return Error(err)
        return Ok(tuple(self.payment_methods))

    async def get_stripe_publishable_key(self):
        if err := await self._enter("get_stripe_publishable_key"):
            return Error(err)
        return Ok(self.publishable_key)

    async def create_payment_method(self, provider_token, billing_address: Address, set_as_default=False):
        if err := await self._enter("create_payment_method"):
            return Error(err)
        if set_as_default:
            self.payment_methods = [replace(m, is_default=False) for m in self.payment_methods]
        method = PaymentMethod(
            id=f"pm_new_{len(self.payment_methods)}",
            last4="1881",
            brand="visa",
            is_default=set_as_default,
            billing_address=billing_address,
        )
        self.payment_methods.append(method)
        return Ok(method)

    async def delete_payment_method(self, payment_method_id):
        if err := await self._enter("delete_payment_method"):
            return Error(err)
        before = len(self.payment_methods)
        self.payment_methods = [m for m in self.payment_methods if m.id != payment_method_id]
        return Ok(len(self.payment_methods) < before)

    async def set_default_payment_method(self, payment_method_id):
        if err := await self._enter("set_default_payment_method"):
            return Error(err)
        if not any(m.id == payment_method_id for m in self.payment_methods):
            return Ok(False)
        self.payment_methods = [
            replace(m, is_default=m.id == payment_method_id) for m in self.payment_methods
        ]
        return Ok(True)

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def place_order(self, data: PlaceOrderInput):
        if err := await self._enter("place_order"):
            return Error(err)
        self.placements.append(data)

        if data.payment_method_id == "pm_no_data":
            return Ok(None)

        basket = self.snapshot()
        if basket is None or basket.is_empty:
            return Ok(PlaceOrderResponse(errors=(FieldError("basket", "Basket is empty"),)))
        if data.amount != basket.charge_total:
            return Ok(PlaceOrderResponse(errors=(FieldError("amount", "Amount does not match basket total"),)))

        if data.payment_method_id == "pm_declined":
            return Ok(
                PlaceOrderResponse(
                    payment_transaction_status="requires_payment_method",
                    errors=(FieldError("paymentMethod", "Your card was declined."),),
                )
            )

        if data.payment_method_id == "pm_3ds":
            order = self._order_from_basket(basket, data, status="payment_pending")
            return Ok(
                PlaceOrderResponse(
                    order=order,
                    next_action=NextAction(type="requires_action", client_secret=f"{order.payment_intent_id}_secret"),
                    payment_transaction_status="requires_action",
                )
            )

        order = self._order_from_basket(basket, data, status="paid")
        self.lines = None
        return Ok(PlaceOrderResponse(order=order, payment_transaction_status="succeeded"))

    async def update_payment_intent(self, payment_intent_id):
        if err := await self._enter("update_payment_intent"):
            return Error(err)
        self.intent_updates.append(payment_intent_id)
        if not self.confirm_result:
            return Ok(False)
        for order in self.orders.values():
            if order.payment_intent_id == payment_intent_id:
                self.orders[order.id] = replace(order, status="paid", payment_transaction_status="succeeded")
                self.lines = None
                return Ok(True)
        return Ok(False)

    async def get_order(self, order_id):
        if err := await self._enter("get_order"):
            return Error(err)
        return Ok(self.orders.get(order_id))

    async def get_order_history(self, limit=20, offset=0):
        if err := await self._enter("get_order_history"):
            return Error(err)
        orders = tuple(self.orders.values())
        return Ok(OrderPage(orders=orders[offset : offset + limit], total_count=len(orders)))

    async def cancel_order(self, order_id):
        if err := await self._enter("cancel_order"):
            return Error(err)
        order = self.orders.get(order_id)
        if order is None or order.status == "cancelled":
            return Ok(False)
        self.orders[order_id] = replace(order, status="cancelled")
        return Ok(True)

    async def process_refund(self, order_id, amount, reason=None):
        if err := await self._enter("process_refund"):
            return Error(err)
        order = self.orders.get(order_id)
        return Ok(order is not None and amount <= order.charge_total)


def expect_ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def expect_error(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")
