import asyncio

import pytest

from basketry.checkout import IntentLedger


class _Confirm:
    def __init__(self, *results: bool, delay: float = 0.0) -> None:
        self.results = list(results)
        self.delay = delay
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.results.pop(0)


class TestIntentLedger:
    @pytest.mark.asyncio
    async def test_confirmed_once(self):
        ledger = IntentLedger()
        confirm = _Confirm(True)

        assert await ledger.run("pi_1", confirm)
        assert await ledger.run("pi_1", confirm)

        assert ledger.is_confirmed("pi_1")
        assert confirm.calls == 1

    @pytest.mark.asyncio
    async def test_failure_allows_retry(self):
        ledger = IntentLedger()
        confirm = _Confirm(False, True)

        assert not await ledger.run("pi_1", confirm)
        assert not ledger.is_pending("pi_1")
        assert await ledger.run("pi_1", confirm)

        assert confirm.calls == 2

    @pytest.mark.asyncio
    async def test_waiters_share_result(self):
        ledger = IntentLedger()
        confirm = _Confirm(False, delay=0.01)

        results = await asyncio.gather(ledger.run("pi_1", confirm), ledger.run("pi_1", confirm))

        assert results == [False, False]
        assert confirm.calls == 1

    @pytest.mark.asyncio
    async def test_exception_clears_record(self):
        ledger = IntentLedger()

        async def explode() -> bool:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await ledger.run("pi_1", explode)

        assert not ledger.is_pending("pi_1")
        assert not ledger.is_confirmed("pi_1")

    @pytest.mark.asyncio
    async def test_clear(self):
        ledger = IntentLedger()
        await ledger.run("pi_1", _Confirm(True))

        ledger.clear()

        assert not ledger.is_confirmed("pi_1")
