"""
Unit tests for the minimum-interval request throttle.
"""

import asyncio
import time

import pytest

from llm.throttle import RequestThrottle


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def make_throttle(min_interval=1.0):
    clock = FakeClock()
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)
        clock.now += delay

    throttle = RequestThrottle(min_interval, clock=clock, sleep=fake_sleep)
    return throttle, clock, delays


@pytest.mark.unit
@pytest.mark.asyncio
async def test_first_request_not_delayed():
    throttle, clock, delays = make_throttle()

    delay = await throttle.wait()

    assert delay == 0.0
    assert delays == []
    assert throttle.last_request_time == clock.now


@pytest.mark.unit
@pytest.mark.asyncio
async def test_back_to_back_requests_wait_remaining_interval():
    throttle, clock, delays = make_throttle(min_interval=1.0)

    await throttle.wait()
    clock.now += 0.25
    delay = await throttle.wait()

    assert delay == pytest.approx(0.75)
    assert delays == [pytest.approx(0.75)]
    # Timestamp taken after the wait, right before the request goes out
    assert throttle.last_request_time == pytest.approx(101.0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_delay_once_interval_elapsed():
    throttle, clock, delays = make_throttle(min_interval=1.0)

    await throttle.wait()
    clock.now += 1.5
    delay = await throttle.wait()

    assert delay == 0.0
    assert delays == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_spacing_measured_in_wall_clock_time():
    """Real asyncio.sleep keeps two requests at least min_interval apart"""
    throttle = RequestThrottle(0.05)

    await throttle.wait()
    first = time.monotonic()
    await throttle.wait()
    second = time.monotonic()

    # asyncio may wake a timer up to one clock tick early
    assert second - first >= 0.05 - 0.005


@pytest.mark.unit
@pytest.mark.asyncio
async def test_concurrent_waits_do_not_lock():
    """Two coroutines racing on one gate both complete"""
    throttle = RequestThrottle(0.01)

    results = await asyncio.gather(throttle.wait(), throttle.wait())

    assert len(results) == 2
