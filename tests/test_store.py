import pytest

from basketry.model import Basket, BasketItem, CourseRef
from basketry.pricing import ViolationKind
from basketry.store import BasketStateStore, MutationLock, StoreState

from tests.fakes import expect_error, expect_ok


def _make_basket(basket_id: str = "b1", price: int = 4500) -> Basket:
    item = BasketItem(id="i1", course=CourseRef(id="101", name="Ballet"), price=price, total_price=price)
    return Basket(id=basket_id, items=(item,), sub_total=price, total=price, charge_total=price)


class TestBasketStateStore:
    def test_starts_uninitialized(self):
        store = BasketStateStore()

        assert store.get() is None
        assert store.state is StoreState.UNINITIALIZED
        assert not store.loading

    def test_replace_commits_snapshot(self):
        store = BasketStateStore()
        basket = _make_basket()

        store.begin_loading()
        assert store.loading

        assert expect_ok(store.replace(basket)) is basket
        assert store.get() is basket
        assert store.state is StoreState.READY

    def test_inconsistent_snapshot_is_kept_and_reported(self):
        store = BasketStateStore()
        broken = Basket(id="b1", sub_total=100, total=90, charge_total=90)

        found = expect_error(store.replace(broken))

        assert store.get() is broken
        assert found[0].kind is ViolationKind.TOTAL_MISMATCH

    def test_fail_keeps_snapshot(self):
        store = BasketStateStore()
        basket = _make_basket()
        store.replace(basket)

        store.begin_loading()
        store.fail("Connection refused")

        assert store.state is StoreState.ERROR
        assert store.last_error == "Connection refused"
        assert store.get() is basket

    def test_replace_clears_error(self):
        store = BasketStateStore()
        store.fail("boom")

        store.replace(_make_basket())

        assert store.last_error is None
        assert store.state is StoreState.READY

    def test_reset(self):
        store = BasketStateStore()
        store.replace(_make_basket())

        store.reset()

        assert store.get() is None
        assert store.state is StoreState.UNINITIALIZED

    def test_reset_keeps_checkout_hold(self):
        store = BasketStateStore()
        store.replace(_make_basket())
        store.lock.hold()

        store.reset()

        assert store.lock.held_by_checkout


class TestSubscribe:
    def test_listener_sees_every_commit(self):
        store = BasketStateStore()
        seen: list[Basket | None] = []
        store.subscribe(seen.append)

        first, second = _make_basket("b1"), _make_basket("b1", price=2500)
        store.replace(first)
        store.replace(second)
        store.reset()

        assert seen == [first, second, None]

    def test_reset_of_empty_store_is_silent(self):
        store = BasketStateStore()
        seen: list[Basket | None] = []
        store.subscribe(seen.append)

        store.reset()

        assert seen == []

    def test_unsubscribe(self):
        store = BasketStateStore()
        seen: list[Basket | None] = []
        unsubscribe = store.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        store.replace(_make_basket())

        assert seen == []

    def test_failing_listener_does_not_block_others(self):
        store = BasketStateStore()
        seen: list[Basket | None] = []

        def broken(_: Basket | None) -> None:
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(seen.append)
        basket = _make_basket()

        store.replace(basket)

        assert seen == [basket]


class TestMutationLock:
    def test_hold_and_release(self):
        lock = MutationLock()

        lock.hold()
        assert lock.held_by_checkout
        lock.release()
        assert not lock.held_by_checkout

    @pytest.mark.asyncio
    async def test_context_manager(self):
        lock = MutationLock()

        async with lock:
            assert lock.locked
        assert not lock.locked

    @pytest.mark.asyncio
    async def test_released_on_exception(self):
        lock = MutationLock()

        with pytest.raises(ValueError):
            async with lock:
                raise ValueError("boom")

        assert not lock.locked
