from __future__ import annotations

import asyncio

import pytest

from pytraintracker.scheduler import PollingScheduler


@pytest.mark.asyncio
async def test_first_tick_runs_immediately_and_repeats() -> None:
    ticks: list[float] = []

    async def _tick() -> None:
        ticks.append(asyncio.get_running_loop().time())

    scheduler = PollingScheduler(_tick, interval=0.02)
    scheduler.start()
    await asyncio.sleep(0.09)
    await scheduler.aclose()

    assert len(ticks) >= 3
    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_stop_leaves_no_dangling_task() -> None:
    calls = 0

    async def _tick() -> None:
        nonlocal calls
        calls += 1

    scheduler = PollingScheduler(_tick, interval=10.0)
    scheduler.start()
    await asyncio.sleep(0.01)
    await scheduler.aclose()
    await asyncio.sleep(0.02)

    assert calls == 1
    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_ticks_never_overlap_and_overruns_are_dropped() -> None:
    active = 0
    max_active = 0

    async def _slow_tick() -> None:
        nonlocal active, max_active
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.05)
        active -= 1

    scheduler = PollingScheduler(_slow_tick, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.12)
    await scheduler.aclose()

    assert max_active == 1
    assert scheduler.dropped_ticks > 0


@pytest.mark.asyncio
async def test_in_flight_tick_completes_after_stop() -> None:
    started = asyncio.Event()
    finished: list[bool] = []

    async def _tick() -> None:
        started.set()
        await asyncio.sleep(0.03)
        finished.append(True)

    scheduler = PollingScheduler(_tick, interval=10.0)
    scheduler.start()
    await started.wait()
    await scheduler.aclose(grace=1.0)

    assert finished == [True]
    assert scheduler.tick_count == 1


@pytest.mark.asyncio
async def test_in_flight_tick_is_cancelled_after_grace() -> None:
    started = asyncio.Event()

    async def _hung_tick() -> None:
        started.set()
        await asyncio.sleep(60)

    scheduler = PollingScheduler(_hung_tick, interval=10.0)
    scheduler.start()
    await started.wait()
    await scheduler.aclose(grace=0.01)

    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_failing_tick_does_not_stop_polling() -> None:
    calls = 0

    async def _flaky_tick() -> None:
        nonlocal calls
        calls += 1
        raise RuntimeError("boom")

    scheduler = PollingScheduler(_flaky_tick, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.aclose()

    assert calls >= 2


@pytest.mark.asyncio
async def test_start_twice_is_a_no_op() -> None:
    calls = 0

    async def _tick() -> None:
        nonlocal calls
        calls += 1

    scheduler = PollingScheduler(_tick, interval=10.0)
    scheduler.start()
    scheduler.start()
    await asyncio.sleep(0.01)
    await scheduler.aclose()

    assert calls == 1


def test_interval_must_be_positive() -> None:
    async def _tick() -> None:
        return None

    with pytest.raises(ValueError):
        PollingScheduler(_tick, interval=0)
