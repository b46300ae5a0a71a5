import asyncio

import pytest

from app.core.single_flight import SingleFlight


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_result(self):
        flight: SingleFlight[int] = SingleFlight("test")
        started = 0
        release = asyncio.Event()

        async def work() -> int:
            nonlocal started
            started += 1
            await release.wait()
            return 42

        waiters = [asyncio.create_task(flight.run(work)) for _ in range(3)]
        await asyncio.sleep(0)
        assert flight.in_flight
        release.set()

        assert await asyncio.gather(*waiters) == [42, 42, 42]
        assert started == 1
        assert not flight.in_flight

    @pytest.mark.asyncio
    async def test_exception_reaches_every_waiter(self):
        flight: SingleFlight[int] = SingleFlight("test")
        release = asyncio.Event()

        async def work() -> int:
            await release.wait()
            raise ValueError("boom")

        waiters = [asyncio.create_task(flight.run(work)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(*waiters, return_exceptions=True)
        assert all(isinstance(r, ValueError) for r in results)

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_run(self):
        flight: SingleFlight[str] = SingleFlight("test")
        release = asyncio.Event()

        async def work() -> str:
            await release.wait()
            return "done"

        impatient = asyncio.create_task(flight.run(work))
        patient = asyncio.create_task(flight.run(work))
        await asyncio.sleep(0)
        impatient.cancel()
        await asyncio.sleep(0)
        release.set()

        assert await patient == "done"
        assert impatient.cancelled()

    @pytest.mark.asyncio
    async def test_cancel_stops_in_flight_run(self):
        flight: SingleFlight[None] = SingleFlight("test")

        async def work() -> None:
            await asyncio.sleep(10)

        waiter = asyncio.create_task(flight.run(work))
        await asyncio.sleep(0)
        flight.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert not flight.in_flight

    @pytest.mark.asyncio
    async def test_sequential_calls_run_separately(self):
        flight: SingleFlight[int] = SingleFlight("test")
        calls = []

        async def work() -> int:
            calls.append(1)
            return len(calls)

        assert await flight.run(work) == 1
        assert await flight.run(work) == 2
