import fnmatch
import json
import os
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("REDIS_NAMESPACE", "resque")
os.environ.setdefault("PAGE_SIZE", "20")


def _stop(stop: int, length: int) -> int:
    return length + stop if stop < 0 else stop


class MockRedisClient:
    """In-memory async Redis covering the commands the dashboard issues (decoded strings)."""

    def __init__(self):
        self._store: dict[str, Any] = {}
        self._types: dict[str, str] = {}

    def _put(self, key: str, kind: str, default):
        if key not in self._store:
            self._store[key] = default
            self._types[key] = kind
        return self._store[key]

    def _drop_if_empty(self, key: str) -> None:
        if key in self._store and not self._store[key]:
            del self._store[key]
            del self._types[key]

    async def type(self, key: str) -> str:
        return self._types.get(key, "none")

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if key in self._store:
                del self._store[key]
                del self._types[key]
                deleted += 1
        return deleted

    async def keys(self, pattern: str = "*") -> list[str]:
        return [k for k in self._store if fnmatch.fnmatchcase(k, pattern)]

    async def info(self) -> dict[str, Any]:
        return {"redis_version": "7.2.0", "connected_clients": 1}

    async def aclose(self) -> None:
        pass

    # strings
    async def get(self, key: str) -> str | None:
        return self._store.get(key) if self._types.get(key) == "string" else None

    async def set(self, key: str, value: Any) -> bool:
        self._store[key] = str(value)
        self._types[key] = "string"
        return True

    async def strlen(self, key: str) -> int:
        return len(self._store.get(key, ""))

    async def mget(self, keys: list[str]) -> list[str | None]:
        return [await self.get(k) for k in keys]

    # lists
    async def llen(self, key: str) -> int:
        return len(self._store.get(key, []))

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        items = self._store.get(key, [])
        return list(items[start:_stop(stop, len(items)) + 1])

    async def lindex(self, key: str, index: int) -> str | None:
        items = self._store.get(key, [])
        try:
            return items[index]
        except IndexError:
            return None

    async def lset(self, key: str, index: int, value: str) -> bool:
        items = self._store.get(key)
        if items is None:
            raise ResponseError("no such key")
        if not -len(items) <= index < len(items):
            raise ResponseError("index out of range")
        items[index] = value
        return True

    async def lrem(self, key: str, count: int, value: str) -> int:
        items = self._store.get(key, [])
        removed = 0
        for n, item in enumerate(list(items)):
            if item == value and (count == 0 or removed < count):
                del items[n - removed]
                removed += 1
        self._drop_if_empty(key)
        return removed

    async def rpush(self, key: str, *values: str) -> int:
        items = self._put(key, "list", [])
        items.extend(values)
        return len(items)

    # sets
    async def scard(self, key: str) -> int:
        return len(self._store.get(key, {}))

    async def smembers(self, key: str) -> list[str]:
        # dict keeps insertion order so tests see a deterministic enumeration
        return list(self._store.get(key, {}))

    async def sadd(self, key: str, *members: str) -> int:
        members_ = self._put(key, "set", {})
        added = 0
        for m in members:
            if m not in members_:
                members_[m] = None
                added += 1
        return added

    async def srem(self, key: str, *members: str) -> int:
        members_ = self._store.get(key, {})
        removed = 0
        for m in members:
            if m in members_:
                del members_[m]
                removed += 1
        self._drop_if_empty(key)
        return removed

    # sorted sets
    async def zadd(self, key: str, mapping: dict[str, float]) -> int:
        scores = self._put(key, "zset", {})
        added = sum(1 for m in mapping if m not in scores)
        scores.update(mapping)
        return added

    async def zcard(self, key: str) -> int:
        return len(self._store.get(key, {}))

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        scores = self._store.get(key, {})
        ordered = sorted(scores, key=lambda m: (scores[m], m))
        return ordered[start:_stop(stop, len(ordered)) + 1]

    # hashes (outside the dashboard's key types)
    async def hset(self, key: str, field: str, value: str) -> int:
        fields = self._put(key, "hash", {})
        fields[field] = value
        return 1


class UnreachableRedis:
    """Every command fails the way redis-py does when the server refuses connections."""

    def __getattr__(self, name: str):
        async def _fail(*args, **kwargs):
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

        return _fail


def failure(queue: str, exception: str, error: str = "boom", **extra: Any) -> str:
    record = {
        "failed_at": "2024/01/01 10:00:00 UTC",
        "payload": {"class": f"{queue.title()}Job", "args": [1, "two"]},
        "exception": exception,
        "error": error,
        "backtrace": ["app/jobs.py:10:in `perform'"],
        "worker": "host1:100:default",
        "queue": queue,
    }
    record.update(extra)
    return json.dumps(record)


@pytest.fixture
def mock_redis() -> MockRedisClient:
    return MockRedisClient()


@pytest.fixture
def store(mock_redis):
    from app.store.client import Store
    return Store(mock_redis, namespace="resque", redis_id="localhost:6379/0")


@pytest.fixture
def unavailable_store():
    from app.store.client import Store
    return Store(UnreachableRedis(), namespace="resque", redis_id="localhost:6379/0")


@pytest.fixture
def add_failures(mock_redis):
    async def _add(*records: str) -> None:
        await mock_redis.rpush("resque:failed", *records)

    return _add


@pytest_asyncio.fixture
async def client(store) -> AsyncGenerator[AsyncClient, None]:
    from app.deps import get_store
    from app.main import app
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unavailable_client(unavailable_store) -> AsyncGenerator[AsyncClient, None]:
    from app.deps import get_store
    from app.main import app
    app.dependency_overrides[get_store] = lambda: unavailable_store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_failure():
    return failure
