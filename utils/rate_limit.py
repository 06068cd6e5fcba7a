"""
Fixed-window request throttling keyed by identity.

When now > reset_at the window restarts with count=1, otherwise the
count is incremented; a request is rejected once count exceeds the
limit. Windows live in a RateLimitStore that serializes updates per
process; admit() evicts expired windows as traffic flows.
"""
from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from utils.security import utcnow


@dataclass
class RateWindow:
    count: int
    reset_at: datetime


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime
    retry_after: int


class RateLimitStore:
    """In-memory window table guarded by a lock."""

    def __init__(self):
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, now: datetime, window: timedelta) -> RateWindow:
        with self._lock:
            current = self._windows.get(key)
            if current is None or now > current.reset_at:
                current = RateWindow(count=1, reset_at=now + window)
                self._windows[key] = current
            else:
                current.count += 1
            return RateWindow(current.count, current.reset_at)

    def get(self, key: str) -> Optional[RateWindow]:
        with self._lock:
            return self._windows.get(key)

    def sweep(self, now: datetime) -> int:
        """Evict windows that have already expired; returns how many were dropped."""
        with self._lock:
            stale = [key for key, w in self._windows.items() if now > w.reset_at]
            for key in stale:
                del self._windows[key]
            return len(stale)

    def __len__(self):
        return len(self._windows)


class RateLimiter:
    def __init__(
        self,
        store: RateLimitStore | None = None,
        limit: int = 10,
        window: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utcnow,
        sweep_interval: timedelta = timedelta(minutes=1),
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window <= timedelta(0):
            raise ValueError("window must be positive")
        self.store = store if store is not None else RateLimitStore()
        self.limit = limit
        self.window = window
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._next_sweep: Optional[datetime] = None

    def admit(self, identity_key: str, limit: int | None = None, window: timedelta | None = None) -> RateDecision:
        limit = self.limit if limit is None else limit
        window = self.window if window is None else window
        now = self.clock()
        # expired windows are dropped at most once per sweep_interval
        if self._next_sweep is None or now >= self._next_sweep:
            self._next_sweep = now + self.sweep_interval
            self.store.sweep(now)
        state = self.store.hit(f"rate_limit_{identity_key}", now, window)
        retry_after = max(0, math.ceil((state.reset_at - now).total_seconds()))
        return RateDecision(
            allowed=state.count <= limit,
            limit=limit,
            remaining=max(0, limit - state.count),
            reset_at=state.reset_at,
            retry_after=retry_after,
        )

    def sweep(self) -> int:
        return self.store.sweep(self.clock())
