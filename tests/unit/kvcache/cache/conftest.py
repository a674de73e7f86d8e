"""
Fixtures for cache client tests.

Provides an in-memory async stand-in for ``redis.asyncio.Redis`` covering the
commands the cache client issues, with a controllable clock for expiry.
"""

import pytest
from redis.exceptions import ResponseError

from kvcache.cache.client import KeyValueCacheClient
from kvcache.cache.config import ExpiryPolicy
from kvcache.cache.redis_client import RedisClient

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: int = 1_000_000):
        self.now_ms = start_ms

    def advance(self, seconds: int) -> None:
        self.advance_ms(seconds * 1000)

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


class FakeRedis:
    """In-memory store double for string, hash and list commands."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.data: dict[str, object] = {}
        self.expires_at: dict[str, int] = {}
        self.commands: list[str] = []

    def _evict_expired(self, key):
        deadline = self.expires_at.get(key)
        if deadline is not None and deadline <= self.clock.now_ms:
            self.data.pop(key, None)
            self.expires_at.pop(key, None)

    def _lookup(self, key, kind):
        self._evict_expired(key)
        value = self.data.get(key)
        if value is not None and not isinstance(value, kind):
            raise ResponseError(WRONGTYPE)
        return value

    def _drop_if_empty(self, key):
        if not self.data.get(key):
            self.data.pop(key, None)
            self.expires_at.pop(key, None)

    async def ping(self):
        self.commands.append("PING")
        return True

    async def set(self, key, value, px=None):
        self.commands.append("SET")
        self.data[key] = str(value)
        self.expires_at.pop(key, None)
        if px is not None:
            self.expires_at[key] = self.clock.now_ms + px
        return True

    async def get(self, key):
        self.commands.append("GET")
        return self._lookup(key, str)

    async def delete(self, *keys):
        self.commands.append("DEL")
        deleted = 0
        for key in keys:
            self._evict_expired(key)
            if key in self.data:
                del self.data[key]
                self.expires_at.pop(key, None)
                deleted += 1
        return deleted

    async def exists(self, *keys):
        self.commands.append("EXISTS")
        count = 0
        for key in keys:
            self._evict_expired(key)
            count += key in self.data
        return count

    async def pexpire(self, key, ms):
        self.commands.append("PEXPIRE")
        self._evict_expired(key)
        if key not in self.data:
            return False
        self.expires_at[key] = self.clock.now_ms + ms
        return True

    async def hset(self, name, key=None, value=None, mapping=None):
        self.commands.append("HSET")
        fields = self._lookup(name, dict)
        if fields is None:
            fields = self.data[name] = {}
        items = dict(mapping or {})
        if key is not None:
            items[key] = value
        added = sum(1 for field in items if field not in fields)
        fields.update({field: str(val) for field, val in items.items()})
        return added

    async def hget(self, name, key):
        self.commands.append("HGET")
        return (self._lookup(name, dict) or {}).get(key)

    async def hmget(self, name, keys):
        self.commands.append("HMGET")
        fields = self._lookup(name, dict) or {}
        return [fields.get(key) for key in keys]

    async def hgetall(self, name):
        self.commands.append("HGETALL")
        return dict(self._lookup(name, dict) or {})

    async def hkeys(self, name):
        self.commands.append("HKEYS")
        return list(self._lookup(name, dict) or {})

    async def hdel(self, name, *keys):
        self.commands.append("HDEL")
        fields = self._lookup(name, dict)
        if fields is None:
            return 0
        removed = 0
        for key in keys:
            if key in fields:
                del fields[key]
                removed += 1
        self._drop_if_empty(name)
        return removed

    async def rpush(self, name, *values):
        self.commands.append("RPUSH")
        items = self._lookup(name, list)
        if items is None:
            items = self.data[name] = []
        items.extend(str(value) for value in values)
        return len(items)

    async def lset(self, name, index, value):
        self.commands.append("LSET")
        items = self._lookup(name, list)
        if items is None:
            raise ResponseError("no such key")
        if not -len(items) <= index < len(items):
            raise ResponseError("index out of range")
        items[index] = str(value)
        return True

    async def lrange(self, name, start, end):
        self.commands.append("LRANGE")
        items = self._lookup(name, list) or []
        size = len(items)
        start = max(start + size if start < 0 else start, 0)
        end = end + size if end < 0 else end
        if start > end:
            return []
        return list(items[start : end + 1])

    async def lrem(self, name, count, value):
        self.commands.append("LREM")
        items = self._lookup(name, list)
        if items is None:
            return 0
        limit = abs(count) or len(items)
        positions = [i for i, item in enumerate(items) if item == value]
        if count < 0:
            positions.reverse()
        doomed = set(positions[:limit])
        items[:] = [item for i, item in enumerate(items) if i not in doomed]
        self._drop_if_empty(name)
        return len(doomed)


@pytest.fixture
def fake_clock():
    """Controllable store clock."""
    return FakeClock()


@pytest.fixture
def fake_redis(fake_clock):
    """In-memory store double."""
    return FakeRedis(fake_clock)


@pytest.fixture
def connected_redis_client(fake_redis):
    """Redis client wired to the store double."""
    client = RedisClient(url="redis://localhost:6379/0")
    client._client = fake_redis
    return client


@pytest.fixture
def cache_client(connected_redis_client):
    """Cache client backed by the store double."""
    return KeyValueCacheClient(connected_redis_client, expiry=ExpiryPolicy())
