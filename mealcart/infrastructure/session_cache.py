# mealcart/infrastructure/session_cache.py
from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from mealcart.domain.entities import CartSessionResult
from mealcart.infrastructure.rate_limiter import wall_clock_ms


@dataclass
class _Entry:
    expires_at: int
    value: CartSessionResult


class CartSessionCache:
    """TTL cache of built checkout sessions. ttl_ms == 0 disables it."""

    def __init__(self, ttl_ms: int = 60_000, clock: Callable[[], int] = wall_clock_ms) -> None:
        self.ttl_ms = max(0, int(ttl_ms))
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, _Entry] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_ms > 0

    def get(self, key: str) -> Optional[CartSessionResult]:
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
        if entry is None or entry.expires_at <= now:
            return None
        return copy.deepcopy(entry.value)

    def put(self, key: str, value: CartSessionResult) -> None:
        if not self.enabled:
            return
        now = self._clock()
        with self._lock:
            self._gc(now)
            self._data[key] = _Entry(expires_at=now + self.ttl_ms, value=copy.deepcopy(value))

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _gc(self, now: int) -> None:
        expired = [k for k, v in self._data.items() if v.expires_at <= now]
        for k in expired:
            self._data.pop(k, None)
