from __future__ import annotations

from app.core import rate_limit
from app.core.rate_limit import InMemoryRateLimiter


def test_limiter_blocks_after_max_requests_per_key():
    limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60)
    assert limiter.allow("a")
    assert limiter.allow("a")
    assert not limiter.allow("a")
    assert limiter.allow("b")


def test_limiter_window_slides(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(rate_limit.time, "time", lambda: now[0])
    limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60)

    assert limiter.allow("a")
    now[0] += 30
    assert not limiter.allow("a")
    now[0] += 31
    assert limiter.allow("a")


def test_default_analyze_limit():
    assert rate_limit.analyze_rate_limiter.max_requests == 30
    assert rate_limit.analyze_rate_limiter.window_seconds == 60
