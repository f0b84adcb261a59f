"""Namespaced Redis access shared by every dashboard component.

Each method is one Redis primitive on a key relative to the namespace.
Connection refusals and socket timeouts surface as StoreUnavailableError;
no command is retried.
"""

from typing import Any, Awaitable, TypeVar

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from app.core.config import Settings, get_settings
from app.core.exceptions import StoreUnavailableError
from app.core.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class Store:
    def __init__(self, redis_client, namespace: str = "resque", redis_id: str = "localhost:6379/0"):
        self.redis = redis_client
        self.namespace = namespace
        self.redis_id = redis_id

    def key(self, *parts: str) -> str:
        return ":".join([self.namespace, *parts])

    async def _run(self, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except (RedisConnectionError, RedisTimeoutError) as e:
            log.warning("store_unavailable", redis=self.redis_id, reason=str(e))
            raise StoreUnavailableError(self.redis_id) from e

    # Generic

    async def type(self, key: str) -> str:
        return await self._run(self.redis.type(self.key(key)))

    async def delete(self, key: str) -> int:
        return await self._run(self.redis.delete(self.key(key)))

    async def keys(self, pattern: str = "*") -> list[str]:
        """Keys under the namespace, returned without the namespace prefix."""
        prefix = self.key("")
        found = await self._run(self.redis.keys(prefix + pattern))
        return sorted(k[len(prefix):] for k in found)

    async def info(self) -> dict[str, Any]:
        return await self._run(self.redis.info())

    # Strings

    async def get(self, key: str) -> str | None:
        return await self._run(self.redis.get(self.key(key)))

    async def strlen(self, key: str) -> int:
        return await self._run(self.redis.strlen(self.key(key)))

    async def mget(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        return await self._run(self.redis.mget([self.key(k) for k in keys]))

    # Lists

    async def llen(self, key: str) -> int:
        return await self._run(self.redis.llen(self.key(key)))

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        return await self._run(self.redis.lrange(self.key(key), start, stop))

    async def lindex(self, key: str, index: int) -> str | None:
        return await self._run(self.redis.lindex(self.key(key), index))

    async def lset(self, key: str, index: int, value: str) -> None:
        await self._run(self.redis.lset(self.key(key), index, value))

    async def lrem(self, key: str, count: int, value: str) -> int:
        return await self._run(self.redis.lrem(self.key(key), count, value))

    async def rpush(self, key: str, *values: str) -> int:
        return await self._run(self.redis.rpush(self.key(key), *values))

    # Sets

    async def scard(self, key: str) -> int:
        return await self._run(self.redis.scard(self.key(key)))

    async def smembers(self, key: str) -> list[str]:
        """Members in whatever order Redis enumerates them; not stable."""
        return list(await self._run(self.redis.smembers(self.key(key))))

    async def sadd(self, key: str, *members: str) -> int:
        return await self._run(self.redis.sadd(self.key(key), *members))

    async def srem(self, key: str, *members: str) -> int:
        return await self._run(self.redis.srem(self.key(key), *members))

    # Sorted sets

    async def zcard(self, key: str) -> int:
        return await self._run(self.redis.zcard(self.key(key)))

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        return await self._run(self.redis.zrange(self.key(key), start, stop))


def create_redis(settings: Settings | None = None):
    """Async Redis client; lazy, so an unreachable server only fails on first command."""
    s = settings or get_settings()
    return aioredis.from_url(
        s.redis_url,
        decode_responses=True,
        encoding_errors="replace",
        socket_timeout=s.redis_socket_timeout,
        socket_connect_timeout=s.redis_socket_timeout,
    )


def create_store(redis_client=None, settings: Settings | None = None) -> Store:
    s = settings or get_settings()
    return Store(
        redis_client if redis_client is not None else create_redis(s),
        namespace=s.redis_namespace,
        redis_id=s.redis_id,
    )
