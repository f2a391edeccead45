# mealcart/infrastructure/rate_limiter.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _Window:
    count: int
    reset_at: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_ms: int


class FixedWindowRateLimiter:
    """
    Fixed-window request counter per key. A window opens on the first hit
    and fully resets after `window_ms`; expired windows are purged on every check.
    """

    def __init__(self, max_requests: int, window_ms: int, clock: Callable[[], int] = wall_clock_ms) -> None:
        self.max_requests = max(1, int(max_requests))
        self.window_ms = max(1_000, int(window_ms))
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, _Window] = {}

    def check(self, key: str, now: Optional[int] = None) -> RateLimitDecision:
        key = (key or "").strip()
        if not key:
            return RateLimitDecision(True, self.max_requests, 0)

        now = self._clock() if now is None else now
        with self._lock:
            self._gc(now)
            w = self._data.get(key)
            if w is None or now >= w.reset_at:
                self._data[key] = _Window(count=1, reset_at=now + self.window_ms)
                return RateLimitDecision(True, self.max_requests - 1, 0)

            if w.count >= self.max_requests:
                return RateLimitDecision(False, 0, max(0, w.reset_at - now))

            w.count += 1
            return RateLimitDecision(True, max(0, self.max_requests - w.count), 0)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _gc(self, now: int) -> None:
        expired = [k for k, v in self._data.items() if v.reset_at <= now]
        for k in expired:
            self._data.pop(k, None)
