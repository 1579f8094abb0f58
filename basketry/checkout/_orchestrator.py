"""
Payment orchestrator — order placement and the confirmation state machine.

    IDLE → PLACING → COMPLETED
                   → ACTION_REQUIRED → COMPLETED | FAILED | CANCELLED
                   → FAILED

While PLACING or ACTION_REQUIRED the basket is held: mutations answer BUSY.
The store is cleared only on COMPLETED.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from kungfu import Ok, Error

from basketry._defects import guarded
from basketry.basket import from_exception, from_gateway
from basketry.checkout._graph import PlacementSpec, classify_placement
from basketry.checkout._ledger import IntentLedger
from basketry.config import EngineConfig
from basketry.gateway import BackendGateway, GatewayResult
from basketry.model import (
    Address,
    Basket,
    ErrorCode,
    MutationError,
    OperationResult,
    Order,
    OrderPage,
    PaymentOutcome,
    PaymentState,
    PlaceOrderInput,
)
from basketry.store import BasketStateStore

logger = structlog.get_logger(__name__)


class PaymentOrchestrator:
    """
    Drives one checkout at a time for the session.

    Example:
        outcome = await checkout.place_order(basket, method.id)
        match outcome.state:
            case PaymentState.COMPLETED: show_receipt(outcome.order)
            case PaymentState.ACTION_REQUIRED:
                await provider.authenticate(outcome.client_secret)
                await checkout.confirm_payment_intent(outcome.order.payment_intent_id)
            case PaymentState.FAILED: show(outcome.error)
    """

    def __init__(
        self,
        gateway: BackendGateway,
        store: BasketStateStore,
        config: EngineConfig = EngineConfig(),
        ledger: IntentLedger | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._config = config
        self._ledger = ledger or IntentLedger()
        self._state = PaymentState.IDLE
        self._outcome: PaymentOutcome | None = None
        self._timeout: asyncio.TimerHandle | None = None
        self._generation = 0

    @property
    def state(self) -> PaymentState:
        return self._state

    @property
    def last_outcome(self) -> PaymentOutcome | None:
        return self._outcome

    @property
    def pending_order(self) -> Order | None:
        """Order awaiting out-of-band authentication, if any."""
        if self._state is PaymentState.ACTION_REQUIRED and self._outcome is not None:
            return self._outcome.order
        return None

    # ───────────────────────────────────────────────────────────────────────────
    # Placement
    # ───────────────────────────────────────────────────────────────────────────

    async def place_order(
        self,
        basket: Basket,
        payment_method_id: str,
        payment_method_type: str = "card",
        billing_address: Address | None = None,
        line_item_info: dict[str, Any] | None = None,
    ) -> PaymentOutcome:
        """
        Place an order for basket.charge_total.

        Local validation failures (BUSY, EMPTY_BASKET, INVALID_INPUT) leave
        the state machine where it was.
        """
        if self._state.holds_basket:
            return PaymentOutcome.failed(ErrorCode.BUSY, "A payment is already in progress")
        if basket.is_empty:
            return PaymentOutcome.failed(ErrorCode.EMPTY_BASKET, "Basket is empty")
        if not payment_method_id.strip():
            return PaymentOutcome.failed(ErrorCode.INVALID_INPUT, "Payment method is required")

        lock = self._store.lock
        async with lock:
            if self._state.holds_basket or lock.held_by_checkout:
                return PaymentOutcome.failed(ErrorCode.BUSY, "A payment is already in progress")

            self._cancel_timeout()
            self._generation += 1
            generation = self._generation
            self._state = PaymentState.PLACING
            self._outcome = None
            lock.hold()
            logger.info(
                "Placing order",
                basket_id=basket.id,
                charge_total=basket.charge_total,
                payment_method_type=payment_method_type,
            )

            try:
                outcome = await self._place_locked(
                    basket,
                    PlaceOrderInput(
                        amount=basket.charge_total,
                        payment_method_id=payment_method_id,
                        payment_method_type=payment_method_type,
                        currency=self._config.currency,
                        billing_address=billing_address,
                        line_item_info=line_item_info or {},
                    ),
                )
            except BaseException:
                if generation == self._generation:
                    self._settle(PaymentOutcome.failed(ErrorCode.EXCEPTION_ERROR, "Order placement raised"))
                raise

            if generation != self._generation:
                # Reset while placing; the session this outcome belonged to is gone.
                logger.warning(
                    "Placement finished after reset",
                    basket_id=basket.id,
                    state=outcome.state.name,
                    order_id=outcome.order.id if outcome.order else None,
                )
                return outcome

            return self._settle(outcome, basket_id=basket.id)

    async def _place_locked(self, basket: Basket, request: PlaceOrderInput) -> PaymentOutcome:
        strict = self._config.strict

        if self._config.verify_totals:
            match await guarded("get_basket", self._gateway.get_basket, strict=strict):
                case Error(exc):
                    return PaymentOutcome.failed(ErrorCode.EXCEPTION_ERROR, str(exc))
                case Ok(Error(e)):
                    return PaymentOutcome.failed(ErrorCode.NETWORK_ERROR, e.message)
                case Ok(Ok(None)):
                    return PaymentOutcome.failed(ErrorCode.EMPTY_BASKET, "Basket no longer exists")
                case Ok(Ok(server)) if server.charge_total != basket.charge_total:
                    self._store.replace(server)
                    logger.warning(
                        "Basket total changed before placement",
                        basket_id=server.id,
                        expected=basket.charge_total,
                        actual=server.charge_total,
                    )
                    return PaymentOutcome.failed(
                        ErrorCode.TOTAL_CHANGED,
                        "The basket total has changed. Please review before paying.",
                        charge_total=server.charge_total,
                    )
                case Ok(Ok(server)) if server.is_empty:
                    self._store.replace(server)
                    return PaymentOutcome.failed(ErrorCode.EMPTY_BASKET, "Basket is empty")

        match await guarded("place_order", lambda: self._gateway.place_order(request), strict=strict):
            case Error(exc):
                return PaymentOutcome.failed(ErrorCode.EXCEPTION_ERROR, str(exc))
            case Ok(Error(e)):
                return PaymentOutcome.failed(ErrorCode.NETWORK_ERROR, f"Failed to place order: {e.message}")
            case Ok(Ok(response)):
                pass

        match await guarded(
            "classify_placement",
            lambda: classify_placement(PlacementSpec(response)),
            strict=strict,
        ):
            case Ok(outcome):
                return outcome
            case Error(exc):
                return PaymentOutcome.failed(ErrorCode.EXCEPTION_ERROR, str(exc))

    # ───────────────────────────────────────────────────────────────────────────
    # Confirmation
    # ───────────────────────────────────────────────────────────────────────────

    async def confirm_payment_intent(self, payment_intent_id: str) -> bool:
        """
        Confirm the pending intent after out-of-band authentication.

        Idempotent: once confirmed, later calls return True without calling
        the backend. Concurrent calls wait for the in-flight one. Returns
        False if nothing is awaiting this intent (cancelled, timed out,
        failed) or the backend did not confirm.
        """
        if self._ledger.is_confirmed(payment_intent_id):
            return True

        if not self._ledger.is_pending(payment_intent_id) and not self._awaits(payment_intent_id):
            logger.info("No pending payment for intent", intent_id=payment_intent_id, state=self._state.name)
            return False

        return await self._ledger.run(payment_intent_id, lambda: self._confirm_once(payment_intent_id))

    def _awaits(self, payment_intent_id: str) -> bool:
        order = self.pending_order
        if order is None or not payment_intent_id:
            return False
        return order.payment_intent_id is None or order.payment_intent_id == payment_intent_id

    async def _confirm_once(self, payment_intent_id: str) -> bool:
        order = self.pending_order
        generation = self._generation
        match await guarded(
            "update_payment_intent",
            lambda: self._gateway.update_payment_intent(payment_intent_id),
            strict=self._config.strict,
        ):
            case Error(_):
                return False
            case Ok(Error(e)):
                # Still ACTION_REQUIRED; the caller may retry.
                logger.warning("Payment confirmation failed", intent_id=payment_intent_id, error=e.message)
                return False
            case Ok(Ok(True)) if generation != self._generation:
                logger.warning("Payment confirmed after reset", intent_id=payment_intent_id)
                return True
            case Ok(Ok(True)):
                if self._state is not PaymentState.ACTION_REQUIRED:
                    logger.warning(
                        "Payment confirmed after leaving ACTION_REQUIRED",
                        intent_id=payment_intent_id,
                        state=self._state.name,
                    )
                self._settle(
                    PaymentOutcome(
                        state=PaymentState.COMPLETED,
                        order=order,
                        payment_transaction_status="succeeded",
                    )
                )
                return True
            case Ok(Ok(_)):
                if self._state is PaymentState.ACTION_REQUIRED:
                    self._settle(
                        PaymentOutcome.failed(
                            ErrorCode.ORDER_ERROR,
                            "Payment confirmation was rejected",
                            order=order,
                        )
                    )
                return False

    async def cancel_payment_action(self) -> PaymentOutcome | None:
        """ACTION_REQUIRED → CANCELLED. None if nothing is awaiting action."""
        if self._state is not PaymentState.ACTION_REQUIRED:
            return None
        order = self.pending_order
        logger.info("Payment action cancelled", order_id=order.id if order else None)
        return self._settle(PaymentOutcome.cancelled(order))

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def cancel_order(self, order_id: str) -> bool:
        """Single-shot; never retried."""
        if not order_id.strip():
            return False
        return await self._single_shot("cancel_order", lambda: self._gateway.cancel_order(order_id), order_id=order_id)

    async def process_refund(self, order_id: str, amount: int, reason: str | None = None) -> bool:
        """Single-shot; never retried. amount is pence and must be positive."""
        if not order_id.strip() or amount <= 0:
            logger.info("Refund rejected locally", order_id=order_id, amount=amount)
            return False
        return await self._single_shot(
            "process_refund",
            lambda: self._gateway.process_refund(order_id, amount, reason),
            order_id=order_id,
            amount=amount,
        )

    async def get_order(self, order_id: str) -> OperationResult[Order | None]:
        if not order_id.strip():
            return Error(MutationError(ErrorCode.INVALID_INPUT, "order_id is required"))
        match await guarded("get_order", lambda: self._gateway.get_order(order_id), strict=self._config.strict):
            case Error(exc):
                return Error(from_exception(exc))
            case Ok(Error(e)):
                return Error(from_gateway(e))
            case Ok(Ok(order)):
                return Ok(order)

    async def get_order_history(self, limit: int = 20, offset: int = 0) -> OperationResult[OrderPage]:
        if limit <= 0 or offset < 0:
            return Error(MutationError(ErrorCode.INVALID_INPUT, "limit must be positive and offset non-negative"))
        match await guarded(
            "get_order_history",
            lambda: self._gateway.get_order_history(limit, offset),
            strict=self._config.strict,
        ):
            case Error(exc):
                return Error(from_exception(exc))
            case Ok(Error(e)):
                return Error(from_gateway(e))
            case Ok(Ok(page)):
                return Ok(page)

    async def _single_shot(
        self,
        operation: str,
        call: Callable[[], Awaitable[GatewayResult[bool]]],
        **context: object,
    ) -> bool:
        match await guarded(operation, call, strict=self._config.strict):
            case Ok(Ok(done)):
                logger.info("Order operation finished", operation=operation, success=done, **context)
                return bool(done)
            case Ok(Error(e)):
                logger.warning("Order operation failed", operation=operation, error=e.message, **context)
                return False
            case Error(_):
                return False

    # ───────────────────────────────────────────────────────────────────────────
    # State
    # ───────────────────────────────────────────────────────────────────────────

    def reset(self) -> None:
        """
        Back to IDLE (logout / start over).

        A placement still in flight finishes without settling.
        """
        self._cancel_timeout()
        self._generation += 1
        self._state = PaymentState.IDLE
        self._outcome = None
        self._ledger.clear()
        self._store.lock.release()

    def _settle(self, outcome: PaymentOutcome, basket_id: str | None = None) -> PaymentOutcome:
        self._cancel_timeout()
        self._outcome = outcome
        self._state = outcome.state
        order_id = outcome.order.id if outcome.order else None

        match outcome.state:
            case PaymentState.COMPLETED:
                self._store.reset()
                self._store.lock.release()
                logger.info("Order placed", order_id=order_id, basket_id=basket_id)
            case PaymentState.ACTION_REQUIRED:
                self._schedule_timeout()
                logger.info("Payment requires action", order_id=order_id, next_action=outcome.next_action)
            case _:
                self._store.lock.release()
                logger.warning(
                    "Payment not completed",
                    state=outcome.state.name,
                    error_code=outcome.error_code,
                    error=outcome.error,
                    order_id=order_id,
                )
        return outcome

    def _schedule_timeout(self) -> None:
        timeout = self._config.action_timeout
        if timeout is None:
            return
        loop = asyncio.get_running_loop()
        self._timeout = loop.call_later(timeout.total_seconds(), self._expire)

    def _cancel_timeout(self) -> None:
        if self._timeout is not None:
            self._timeout.cancel()
            self._timeout = None

    def _expire(self) -> None:
        self._timeout = None
        if self._state is not PaymentState.ACTION_REQUIRED:
            return
        self._settle(
            PaymentOutcome.failed(
                ErrorCode.TIMEOUT,
                "Payment authentication timed out",
                order=self.pending_order,
            )
        )


__all__ = ("PaymentOrchestrator",)
