from __future__ import annotations

import time
from collections import defaultdict

from app.core.config import settings


class InMemoryRateLimiter:
    """Sliding-window limiter keyed by client; process-local."""

    def __init__(self, max_requests: int = 30, window_seconds: int = 60) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._events: dict[str, list[float]] = defaultdict(list)

    def allow(self, key: str) -> bool:
        now = time.time()
        cutoff = now - self.window_seconds
        events = [t for t in self._events[key] if t > cutoff]
        if len(events) >= self.max_requests:
            self._events[key] = events
            return False
        events.append(now)
        self._events[key] = events
        return True

    def reset(self) -> None:
        self._events.clear()


analyze_rate_limiter = InMemoryRateLimiter(
    max_requests=settings.analyze_rate_limit,
    window_seconds=settings.analyze_rate_window_seconds,
)
