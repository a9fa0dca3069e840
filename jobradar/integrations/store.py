"""Key/value store with Protocol pattern for dependency injection.

Everything that talks to Redis depends on KeyValueStore, so tests can pass
an in-memory double and production passes a ``redis.asyncio.Redis``.
"""

from typing import Protocol

import redis.asyncio as redis


class KeyValueStore(Protocol):
    """The subset of the Redis command set jobradar relies on."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str, ex: int | None = None) -> object: ...
    async def delete(self, *keys: str) -> int: ...
    async def ping(self) -> bool: ...


def create_store(redis_url: str) -> redis.Redis:
    """Create the process-wide async Redis client.

    The connection is lazy; the first command opens it.
    """
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
    )
