"""Fixed-window request counters in Redis."""

from __future__ import annotations

import time
from typing import Any

from redis.asyncio import Redis


def window_key(prefix: str, subject: str, window_seconds: int, now: float | None = None) -> str:
    """Key for the window containing ``now``; keys roll over every ``window_seconds``."""
    window = int(now if now is not None else time.time()) // window_seconds
    return f"{prefix}:{subject}:{window}"


async def hit(redis: Redis, key: str, window_seconds: int) -> int:
    """Count one request against ``key`` and return the running total for the window."""
    pipe = redis.pipeline()
    pipe.incr(key)
    pipe.expire(key, window_seconds + 1)
    results: list[Any] = await pipe.execute()
    return int(results[0])
