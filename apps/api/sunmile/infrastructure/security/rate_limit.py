import logging
import os
from collections import deque
from time import monotonic
from typing import Deque, Dict, Tuple

import redis

logger = logging.getLogger("rate_limit")

REDIS_URL = os.environ.get("RATE_LIMIT_REDIS_URL", "redis://localhost:6379/0")
KEY_PREFIX = "sunmile:rl"

_client: redis.Redis | None = None
# key -> (window seconds, request timestamps)
_fallback_buckets: Dict[str, Tuple[int, Deque[float]]] = {}


class RateLimitExceeded(Exception):
    pass


def _get_client() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=0.5,
            socket_timeout=0.5,
        )
    return _client


def _sweep_idle(now: float) -> None:
    stale = [
        key
        for key, (window_seconds, timestamps) in _fallback_buckets.items()
        if not timestamps or timestamps[-1] < now - window_seconds
    ]
    for key in stale:
        del _fallback_buckets[key]


def _enforce_in_process(key: str, limit: int, window_seconds: int) -> None:
    now = monotonic()
    _sweep_idle(now)
    _, timestamps = _fallback_buckets.setdefault(key, (window_seconds, deque()))
    cutoff = now - window_seconds
    while timestamps and timestamps[0] < cutoff:
        timestamps.popleft()
    if len(timestamps) >= limit:
        raise RateLimitExceeded
    timestamps.append(now)


def enforce(bucket: str, identifier: str, limit: int, window_seconds: int) -> None:
    """
    Fixed-window limit on ``identifier`` within ``bucket`` via Redis INCR/EXPIRE.
    Counts in process memory when Redis is unreachable.
    """
    key = f"{KEY_PREFIX}:{bucket}:{identifier}"
    try:
        client = _get_client()
        count = client.incr(key)
        if count == 1:
            client.expire(key, window_seconds)
    except redis.RedisError as exc:
        logger.warning("Rate limit Redis fallback engaged: %s", exc.__class__.__name__)
        _enforce_in_process(key, limit, window_seconds)
        return
    if count > limit:
        raise RateLimitExceeded


def reset() -> None:
    _fallback_buckets.clear()
