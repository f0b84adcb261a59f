"""Type-dispatching read access to a single key.

The dashboard does not know ahead of time whether a key holds a list, a set,
a string or a sorted set. StoreAdapter asks Redis for the type once and hands
the key to the reader for that type.

Ranges are inclusive: range_of(key, start, count) returns up to count + 1
values starting at start, for every type.

Sets have no order. A page over a set is a slice of whatever order SMEMBERS
returns on that call, so two requests may page differently.
"""

from enum import Enum

from pydantic import BaseModel

from app.store.client import Store


class KeyType(str, Enum):
    NONE = "none"
    LIST = "list"
    SET = "set"
    STRING = "string"
    ZSET = "zset"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_redis(cls, value: str) -> "KeyType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNSUPPORTED


class KeyView(BaseModel):
    key: str
    type: KeyType
    size: int
    start: int
    values: list[str]


class _Reader:
    async def size(self, store: Store, key: str) -> int:
        return 0

    async def range(self, store: Store, key: str, start: int, count: int) -> list[str]:
        return []


class _ListReader(_Reader):
    async def size(self, store, key):
        return await store.llen(key)

    async def range(self, store, key, start, count):
        return await store.lrange(key, start, start + count)


class _SetReader(_Reader):
    async def size(self, store, key):
        return await store.scard(key)

    async def range(self, store, key, start, count):
        members = await store.smembers(key)
        return members[start:start + count + 1]


class _StringReader(_Reader):
    async def size(self, store, key):
        return await store.strlen(key)

    async def range(self, store, key, start, count):
        value = await store.get(key)
        return [] if value is None else [value]


class _SortedSetReader(_Reader):
    async def size(self, store, key):
        return await store.zcard(key)

    async def range(self, store, key, start, count):
        return await store.zrange(key, start, start + count)


_READERS: dict[KeyType, _Reader] = {
    KeyType.NONE: _Reader(),
    KeyType.LIST: _ListReader(),
    KeyType.SET: _SetReader(),
    KeyType.STRING: _StringReader(),
    KeyType.ZSET: _SortedSetReader(),
    KeyType.UNSUPPORTED: _Reader(),
}


class StoreAdapter:
    def __init__(self, store: Store):
        self.store = store

    async def type_of(self, key: str) -> KeyType:
        return KeyType.from_redis(await self.store.type(key))

    async def size_of(self, key: str) -> int:
        kind = await self.type_of(key)
        return await _READERS[kind].size(self.store, key)

    async def range_of(self, key: str, start: int, count: int) -> list[str]:
        kind = await self.type_of(key)
        return await _READERS[kind].range(self.store, key, max(0, start), count)

    async def inspect(self, key: str, start: int, count: int) -> KeyView:
        """Type, size and one page of values, reading the type only once."""
        start = max(0, start)
        kind = await self.type_of(key)
        reader = _READERS[kind]
        return KeyView(
            key=key,
            type=kind,
            size=await reader.size(self.store, key),
            start=start,
            values=await reader.range(self.store, key, start, count),
        )

    async def keys(self) -> list[str]:
        return await self.store.keys()
