import pytest
import redis

from sunmile.infrastructure.security import rate_limit


class _DownRedis:
    def incr(self, key):
        raise redis.ConnectionError("connection refused")


class _CountingRedis:
    def __init__(self):
        self.counts = {}
        self.expiries = {}

    def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key, seconds):
        self.expiries[key] = seconds


@pytest.fixture(autouse=True)
def _clean_buckets():
    rate_limit.reset()
    yield
    rate_limit.reset()


def test_redis_counter_enforces_limit(monkeypatch):
    client = _CountingRedis()
    monkeypatch.setattr(rate_limit, "_get_client", lambda: client)

    for _ in range(3):
        rate_limit.enforce("login", "10.0.0.1", limit=3, window_seconds=60)
    with pytest.raises(rate_limit.RateLimitExceeded):
        rate_limit.enforce("login", "10.0.0.1", limit=3, window_seconds=60)

    assert client.expiries == {"sunmile:rl:login:10.0.0.1": 60}


def test_falls_back_to_process_memory_when_redis_is_down(monkeypatch):
    monkeypatch.setattr(rate_limit, "_get_client", lambda: _DownRedis())

    rate_limit.enforce("login", "10.0.0.2", limit=2, window_seconds=60)
    rate_limit.enforce("login", "10.0.0.2", limit=2, window_seconds=60)
    with pytest.raises(rate_limit.RateLimitExceeded):
        rate_limit.enforce("login", "10.0.0.2", limit=2, window_seconds=60)

    # Other callers keep their own budget.
    rate_limit.enforce("login", "10.0.0.3", limit=2, window_seconds=60)


def test_fallback_forgets_idle_callers(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr(rate_limit, "_get_client", lambda: _DownRedis())
    monkeypatch.setattr(rate_limit, "monotonic", lambda: clock["now"])

    rate_limit.enforce("login", "10.0.0.4", limit=1, window_seconds=60)
    assert "sunmile:rl:login:10.0.0.4" in rate_limit._fallback_buckets

    clock["now"] += 61
    rate_limit.enforce("login", "10.0.0.5", limit=1, window_seconds=60)

    assert "sunmile:rl:login:10.0.0.4" not in rate_limit._fallback_buckets
    assert "sunmile:rl:login:10.0.0.5" in rate_limit._fallback_buckets


def test_fallback_window_slides(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr(rate_limit, "_get_client", lambda: _DownRedis())
    monkeypatch.setattr(rate_limit, "monotonic", lambda: clock["now"])

    rate_limit.enforce("login", "10.0.0.6", limit=1, window_seconds=60)
    clock["now"] += 30
    with pytest.raises(rate_limit.RateLimitExceeded):
        rate_limit.enforce("login", "10.0.0.6", limit=1, window_seconds=60)

    clock["now"] += 31
    rate_limit.enforce("login", "10.0.0.6", limit=1, window_seconds=60)
