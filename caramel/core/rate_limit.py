"""Sliding-Window Rate Limiter — per-client request quota over a rolling window.

Invariants:
    - A client is admitted iff fewer than max_requests of its hits fall inside
      the last window_seconds
    - Rejected hits are not recorded (a throttled client recovers once its
      oldest admitted hit leaves the window)
    - Clients with no hits inside the window hold no memory

Design Decisions:
    - Timestamp log per client (deque) over fixed buckets: exact window edges
    - No locking: check() never awaits, so it is atomic on the event loop
    - Clock injectable for tests
"""

import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

PRUNE_EVERY = 1000


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one check() call."""
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class SlidingWindowRateLimiter:
    """In-memory sliding-window limiter keyed by client address."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._checks = 0

    def check(self, key: str) -> RateLimitDecision:
        """Record a hit for key if it is within quota."""
        self._checks += 1
        if self._checks % PRUNE_EVERY == 0:
            self.prune()

        now = self._clock()
        hits = self._hits.get(key)
        if hits is None:
            hits = self._hits[key] = deque()
        self._evict(hits, now)

        if len(hits) >= self.max_requests:
            retry_after = hits[0] + self.window_seconds - now
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                retry_after_seconds=max(1, math.ceil(retry_after)),
            )

        hits.append(now)
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - len(hits),
            retry_after_seconds=0,
        )

    def prune(self) -> None:
        """Forget clients whose hits have all left the window."""
        now = self._clock()
        for key in list(self._hits):
            hits = self._hits[key]
            self._evict(hits, now)
            if not hits:
                del self._hits[key]

    def reset(self) -> None:
        self._hits.clear()

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _evict(self, hits: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
