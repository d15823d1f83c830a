"""Tests for request pacing"""

from __future__ import annotations

import pytest

from trendmonitor.pacing import FixedIntervalPacer, NoPacer


class FakeTime:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.asyncio
async def test_first_call_passes_through():
    fake = FakeTime()
    pacer = FixedIntervalPacer(0.4, clock=fake.clock, sleep=fake.sleep)

    await pacer.wait()

    assert fake.sleeps == []


@pytest.mark.asyncio
async def test_back_to_back_calls_wait_full_interval():
    fake = FakeTime()
    pacer = FixedIntervalPacer(1.5, clock=fake.clock, sleep=fake.sleep)

    await pacer.wait()
    await pacer.wait()
    await pacer.wait()

    assert fake.sleeps == [1.5, 1.5]


@pytest.mark.asyncio
async def test_elapsed_time_counts_toward_interval():
    fake = FakeTime()
    pacer = FixedIntervalPacer(1.0, clock=fake.clock, sleep=fake.sleep)

    await pacer.wait()
    fake.now += 0.75
    await pacer.wait()
    fake.now += 5.0
    await pacer.wait()

    assert fake.sleeps == [pytest.approx(0.25)]


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        FixedIntervalPacer(-1)


@pytest.mark.asyncio
async def test_no_pacer():
    assert await NoPacer().wait() is None
