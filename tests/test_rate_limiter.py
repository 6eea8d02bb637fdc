"""Tests for core.rate_limiter.RateLimiter using a fake clock."""

import pytest

from core.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


def test_first_call_does_not_wait(clock):
    limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
    assert limiter.wait() == 0.0
    assert clock.sleeps == []


def test_back_to_back_calls_are_spaced(clock):
    limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
    limiter.wait()
    slept = limiter.wait()
    assert slept == pytest.approx(0.5)
    assert clock.sleeps == [pytest.approx(0.5)]


def test_no_wait_when_interval_already_elapsed(clock):
    limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)
    limiter.wait()
    clock.now += 1.0
    assert limiter.wait() == 0.0
    assert clock.sleeps == []


def test_partial_interval_sleeps_remainder(clock):
    limiter = RateLimiter(4, clock=clock, sleep=clock.sleep)
    limiter.wait()
    clock.now += 0.1
    assert limiter.wait() == pytest.approx(0.15)


def test_zero_rate_disables_throttling(clock):
    limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)
    for _ in range(5):
        limiter.wait()
    assert clock.sleeps == []
    assert limiter.min_interval == 0.0
