"""Tests for RateLimiter."""

from factdesk.rate_limit import RateLimiter


def test_limit_plus_one_fails_then_resets() -> None:
    now = [0.0]
    limiter = RateLimiter(limit=3, window_seconds=3600, clock=lambda: now[0])

    assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]
    assert limiter.remaining == 0

    now[0] = 3600
    assert not limiter.try_acquire()

    now[0] = 3601
    assert limiter.try_acquire()
    assert limiter.remaining == 2


def test_defaults() -> None:
    limiter = RateLimiter()
    assert limiter.limit == 50
    assert limiter.remaining == 50
