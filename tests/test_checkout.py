import asyncio

import pytest

from basketry import CheckoutEngine, EngineConfig
from basketry.model import Address, Basket, ErrorCode, PaymentState

from tests.fakes import FakeBackend, expect_error, expect_ok


async def _make_engine(
    backend: FakeBackend,
    config: EngineConfig = EngineConfig(),
    courses: tuple[str, ...] = ("101",),
) -> CheckoutEngine:
    engine = CheckoutEngine(backend, config)
    for course_id in courses:
        expect_ok(await engine.basket.add_item(course_id, "course"))
    return engine


async def _explode(*args, **kwargs):
    raise RuntimeError("provider sdk crashed")


class TestPlaceOrder:
    @pytest.mark.asyncio
    async def test_happy_path(self, backend):
        engine = await _make_engine(backend)
        address = Address(line1="1 High St", city="Leeds", post_code="LS1 1AA")

        outcome = await engine.checkout.place_order(
            engine.store.get(),
            "pm_card",
            billing_address=address,
            line_item_info={"101": {"attendee": "Sam"}},
        )

        assert outcome.state is PaymentState.COMPLETED
        assert outcome.success
        assert outcome.order.charge_total == 4500
        assert outcome.payment_transaction_status == "succeeded"
        assert engine.checkout.state is PaymentState.COMPLETED
        assert engine.store.get() is None
        assert not engine.store.lock.held_by_checkout

        placed = backend.placements[0]
        assert placed.amount == 4500
        assert placed.currency == "gbp"
        assert placed.payment_method_type == "card"
        assert placed.billing_address == address
        assert placed.line_item_info == {"101": {"attendee": "Sam"}}

    @pytest.mark.asyncio
    async def test_charges_promo_total(self, backend):
        engine = await _make_engine(backend, courses=("103",))
        expect_ok(await engine.basket.apply_promo_code("SAVE10"))

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_card")

        assert outcome.state is PaymentState.COMPLETED
        assert backend.placements[0].amount == 4500

    @pytest.mark.asyncio
    async def test_decline_keeps_basket(self, backend):
        engine = await _make_engine(backend)
        before = engine.store.get()

        outcome = await engine.checkout.place_order(before, "pm_declined")

        assert outcome.state is PaymentState.FAILED
        assert outcome.error_code == ErrorCode.ORDER_ERROR
        assert outcome.error == "Your card was declined."
        assert outcome.field_errors[0].path == "paymentMethod"
        assert engine.store.get() is before
        assert not engine.store.lock.held_by_checkout
        expect_ok(await engine.basket.add_item("102", "course"))

    @pytest.mark.asyncio
    async def test_missing_payload(self, backend):
        engine = await _make_engine(backend)

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_no_data")

        assert outcome.error_code == ErrorCode.NO_DATA
        assert engine.store.get() is not None

    @pytest.mark.asyncio
    async def test_local_validation_keeps_state(self, backend):
        engine = await _make_engine(backend)
        calls = len(backend.calls)

        empty = await engine.checkout.place_order(Basket(id="b"), "pm_card")
        blank = await engine.checkout.place_order(engine.store.get(), "  ")

        assert empty.error_code == ErrorCode.EMPTY_BASKET
        assert blank.error_code == ErrorCode.INVALID_INPUT
        assert engine.checkout.state is PaymentState.IDLE
        assert len(backend.calls) == calls


class TestTotalVerification:
    @pytest.mark.asyncio
    async def test_changed_total_is_not_charged(self, backend):
        engine = await _make_engine(backend)
        stale = engine.store.get()
        backend.catalog["101"] = ("Ballet Beginners", 4800)

        outcome = await engine.checkout.place_order(stale, "pm_card")

        assert outcome.error_code == ErrorCode.TOTAL_CHANGED
        assert outcome.charge_total == 4800
        assert engine.store.get().charge_total == 4800
        assert backend.count("place_order") == 0
        assert not engine.store.lock.held_by_checkout

        retry = await engine.checkout.place_order(engine.store.get(), "pm_card")
        assert retry.state is PaymentState.COMPLETED
        assert backend.placements[0].amount == 4800

    @pytest.mark.asyncio
    async def test_without_verification_server_rejects_amount(self, backend):
        engine = await _make_engine(backend, EngineConfig().with_verify_totals(False))
        stale = engine.store.get()
        backend.catalog["101"] = ("Ballet Beginners", 4800)

        outcome = await engine.checkout.place_order(stale, "pm_card")

        assert outcome.error_code == ErrorCode.ORDER_ERROR
        assert outcome.error == "Amount does not match basket total"
        assert backend.count("get_basket") == 1

    @pytest.mark.asyncio
    async def test_network_failure(self, backend):
        engine = await _make_engine(backend)
        before = engine.store.get()
        backend.offline = True

        outcome = await engine.checkout.place_order(before, "pm_card")

        assert outcome.error_code == ErrorCode.NETWORK_ERROR
        assert engine.store.get() is before
        assert not engine.store.lock.held_by_checkout

    @pytest.mark.asyncio
    async def test_network_failure_during_placement(self, backend):
        engine = await _make_engine(backend, EngineConfig().with_verify_totals(False))
        backend.offline = True

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_card")

        assert outcome.error_code == ErrorCode.NETWORK_ERROR
        assert outcome.error.startswith("Failed to place order")


class TestActionRequired:
    @pytest.mark.asyncio
    async def test_authentication_then_confirm(self, backend):
        engine = await _make_engine(backend)

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        assert outcome.state is PaymentState.ACTION_REQUIRED
        assert outcome.requires_action
        assert outcome.success
        assert outcome.client_secret == "pi_1_secret"
        assert engine.store.get() is not None
        assert engine.store.lock.held_by_checkout
        assert engine.checkout.pending_order.payment_intent_id == "pi_1"
        assert expect_error(await engine.basket.add_item("102", "course")).is_busy

        assert await engine.checkout.confirm_payment_intent("pi_1")

        assert engine.checkout.state is PaymentState.COMPLETED
        assert engine.store.get() is None
        order = expect_ok(await engine.checkout.get_order("ord_1"))
        assert order.status == "paid"

    @pytest.mark.asyncio
    async def test_second_placement_is_busy(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_card")

        assert outcome.error_code == ErrorCode.BUSY
        assert engine.checkout.state is PaymentState.ACTION_REQUIRED

    @pytest.mark.asyncio
    async def test_confirm_is_idempotent(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        assert await engine.checkout.confirm_payment_intent("pi_1")
        assert await engine.checkout.confirm_payment_intent("pi_1")

        assert backend.intent_updates == ["pi_1"]

    @pytest.mark.asyncio
    async def test_concurrent_confirms_call_backend_once(self):
        backend = FakeBackend(delay=0.01)
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        results = await asyncio.gather(
            engine.checkout.confirm_payment_intent("pi_1"),
            engine.checkout.confirm_payment_intent("pi_1"),
            engine.checkout.confirm_payment_intent("pi_1"),
        )

        assert results == [True, True, True]
        assert backend.intent_updates == ["pi_1"]

    @pytest.mark.asyncio
    async def test_unknown_intent(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        assert not await engine.checkout.confirm_payment_intent("pi_other")
        assert engine.checkout.state is PaymentState.ACTION_REQUIRED
        assert backend.intent_updates == []

    @pytest.mark.asyncio
    async def test_rejected_confirmation_fails(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")
        backend.confirm_result = False

        assert not await engine.checkout.confirm_payment_intent("pi_1")

        assert engine.checkout.state is PaymentState.FAILED
        assert engine.checkout.last_outcome.error_code == ErrorCode.ORDER_ERROR
        assert not engine.store.lock.held_by_checkout
        assert engine.store.get() is not None

    @pytest.mark.asyncio
    async def test_confirm_network_failure_can_be_retried(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")
        backend.offline = True

        assert not await engine.checkout.confirm_payment_intent("pi_1")
        assert engine.checkout.state is PaymentState.ACTION_REQUIRED

        backend.offline = False
        assert await engine.checkout.confirm_payment_intent("pi_1")
        assert engine.checkout.state is PaymentState.COMPLETED

    @pytest.mark.asyncio
    async def test_cancel(self, backend):
        engine = await _make_engine(backend)
        before = engine.store.get()
        await engine.checkout.place_order(before, "pm_3ds")

        outcome = await engine.checkout.cancel_payment_action()

        assert outcome.state is PaymentState.CANCELLED
        assert outcome.is_user_cancellation
        assert outcome.error_code == ErrorCode.USER_CANCELLED
        assert engine.store.get() is before
        assert not engine.store.lock.held_by_checkout
        assert await engine.checkout.cancel_payment_action() is None
        assert not await engine.checkout.confirm_payment_intent("pi_1")
        assert backend.intent_updates == []

    @pytest.mark.asyncio
    async def test_action_times_out(self, backend):
        engine = await _make_engine(backend, EngineConfig().with_action_timeout(seconds=0.05))
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        await asyncio.sleep(0.1)

        assert engine.checkout.state is PaymentState.FAILED
        assert engine.checkout.last_outcome.error_code == ErrorCode.TIMEOUT
        assert not engine.store.lock.held_by_checkout
        assert not await engine.checkout.confirm_payment_intent("pi_1")

    @pytest.mark.asyncio
    async def test_confirm_cancels_timeout(self, backend):
        engine = await _make_engine(backend, EngineConfig().with_action_timeout(seconds=0.05))
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")

        assert await engine.checkout.confirm_payment_intent("pi_1")
        await asyncio.sleep(0.1)

        assert engine.checkout.state is PaymentState.COMPLETED

    @pytest.mark.asyncio
    async def test_refresh_cannot_drop_the_hold(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")
        backend.lines = None

        assert expect_error(await engine.basket.refresh()).is_busy

        assert engine.store.lock.held_by_checkout
        assert engine.store.get() is not None
        assert expect_error(await engine.basket.add_item("102", "course")).is_busy
        assert engine.checkout.state is PaymentState.ACTION_REQUIRED
        assert "init_basket" not in backend.calls


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_while_placing_discards_outcome(self):
        backend = FakeBackend(delay=0.01)
        engine = await _make_engine(backend)
        task = asyncio.create_task(engine.checkout.place_order(engine.store.get(), "pm_card"))
        while engine.checkout.state is not PaymentState.PLACING:
            await asyncio.sleep(0)

        await engine.reset()
        outcome = await task

        assert outcome.state is PaymentState.COMPLETED
        assert engine.checkout.state is PaymentState.IDLE
        assert engine.checkout.last_outcome is None
        assert not engine.store.lock.held_by_checkout
        basket = expect_ok(await engine.basket.add_item("102", "course"))
        assert basket.contains_course("102")

    @pytest.mark.asyncio
    async def test_reset_while_confirming_does_not_complete(self):
        backend = FakeBackend(delay=0.01)
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_3ds")
        task = asyncio.create_task(engine.checkout.confirm_payment_intent("pi_1"))
        while "update_payment_intent" not in backend.calls:
            await asyncio.sleep(0)

        engine.checkout.reset()

        assert await task
        assert engine.checkout.state is PaymentState.IDLE
        assert engine.checkout.last_outcome is None


class TestDefects:
    @pytest.mark.asyncio
    async def test_exception_fails_placement(self, backend):
        engine = await _make_engine(backend)
        backend.place_order = _explode

        outcome = await engine.checkout.place_order(engine.store.get(), "pm_card")

        assert outcome.error_code == ErrorCode.EXCEPTION_ERROR
        assert not engine.store.lock.held_by_checkout

    @pytest.mark.asyncio
    async def test_strict_mode_propagates_and_releases(self, backend):
        engine = await _make_engine(backend, EngineConfig().with_strict())
        backend.place_order = _explode

        with pytest.raises(RuntimeError):
            await engine.checkout.place_order(engine.store.get(), "pm_card")

        assert engine.checkout.state is PaymentState.FAILED
        assert not engine.store.lock.held_by_checkout
        assert not engine.store.lock.locked


class TestOrders:
    @pytest.mark.asyncio
    async def test_history_cancel_refund(self, backend):
        engine = await _make_engine(backend)
        await engine.checkout.place_order(engine.store.get(), "pm_card")

        page = expect_ok(await engine.checkout.get_order_history())
        assert page.total_count == 1
        assert page.orders[0].id == "ord_1"

        assert await engine.checkout.process_refund("ord_1", 1000, reason="Cancelled class")
        assert not await engine.checkout.process_refund("ord_1", 10_000)
        assert await engine.checkout.cancel_order("ord_1")
        assert not await engine.checkout.cancel_order("ord_1")

    @pytest.mark.asyncio
    async def test_refund_amount_must_be_positive(self, backend):
        engine = await _make_engine(backend)
        calls = len(backend.calls)

        assert not await engine.checkout.process_refund("ord_1", 0)
        assert not await engine.checkout.process_refund("ord_1", -5)
        assert not await engine.checkout.cancel_order(" ")
        assert len(backend.calls) == calls

    @pytest.mark.asyncio
    async def test_lookup_validation(self, backend):
        engine = CheckoutEngine(backend)

        assert expect_error(await engine.checkout.get_order("")).code == ErrorCode.INVALID_INPUT
        assert expect_error(await engine.checkout.get_order_history(limit=0)).code == ErrorCode.INVALID_INPUT
        assert expect_error(await engine.checkout.get_order_history(offset=-1)).code == ErrorCode.INVALID_INPUT
        assert expect_ok(await engine.checkout.get_order("missing")) is None

    @pytest.mark.asyncio
    async def test_order_failures_are_false(self, backend):
        engine = CheckoutEngine(backend)
        backend.offline = True

        assert not await engine.checkout.cancel_order("ord_1")
        assert expect_error(await engine.checkout.get_order("ord_1")).code == ErrorCode.NETWORK_ERROR
