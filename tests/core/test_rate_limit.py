"""Sliding-window limiter — quota per client, recovery as hits age out."""

import pytest

from caramel.core.rate_limit import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _limiter(clock, max_requests=3, window=900):
    return SlidingWindowRateLimiter(max_requests, window, clock=clock)


def test_allows_up_to_quota_then_rejects():
    limiter = _limiter(FakeClock())
    decisions = [limiter.check("1.2.3.4") for _ in range(4)]
    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]


def test_rejection_reports_time_until_oldest_hit_expires():
    clock = FakeClock()
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("a")
    clock.now += 100
    decision = limiter.check("a")
    assert not decision.allowed
    assert decision.retry_after_seconds == 800


def test_clients_are_counted_separately():
    limiter = _limiter(FakeClock(), max_requests=1)
    assert limiter.check("a").allowed
    assert limiter.check("b").allowed
    assert not limiter.check("a").allowed


def test_quota_recovers_when_window_passes():
    clock = FakeClock()
    limiter = _limiter(clock)
    for _ in range(3):
        limiter.check("a")
    assert not limiter.check("a").allowed

    clock.now += 900
    assert limiter.check("a").allowed


def test_window_slides_hit_by_hit():
    clock = FakeClock()
    limiter = _limiter(clock, max_requests=2, window=10)
    limiter.check("a")            # t=1000
    clock.now += 6
    limiter.check("a")            # t=1006
    clock.now += 5                # t=1011: first hit expired, second still live
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed


def test_rejected_hits_do_not_extend_the_block():
    clock = FakeClock()
    limiter = _limiter(clock, max_requests=1, window=10)
    limiter.check("a")
    for _ in range(5):
        clock.now += 1
        limiter.check("a")
    clock.now = 1010
    assert limiter.check("a").allowed


def test_prune_forgets_idle_clients():
    clock = FakeClock()
    limiter = _limiter(clock)
    limiter.check("a")
    limiter.check("b")
    assert limiter.tracked_clients == 2
    clock.now += 901
    limiter.prune()
    assert limiter.tracked_clients == 0


@pytest.mark.parametrize("max_requests,window", [(0, 10), (5, 0)])
def test_rejects_invalid_configuration(max_requests, window):
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(max_requests, window)
