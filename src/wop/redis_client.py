"""Redis client used for request throttling counters."""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    """Create the shared Redis client."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


def set_redis(client: redis.Redis | None) -> None:
    """Swap the shared client (test suites install an in-memory fake)."""
    global _client  # noqa: PLW0603
    _client = client


async def close_redis() -> None:
    """Close the shared Redis client."""
    global _client  # noqa: PLW0603
    if _client:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Get the Redis client, raising if the app has not connected yet."""
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client
