"""
Key-value cache client for string, hash and list entries.

Every operation is a single live round trip to the store (replace-by-value
and clear are the exceptions, see their docstrings). Nothing is cached
locally and nothing is retried.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kvcache.cache.config import (
    ExpiryPolicy,
    RedisCacheSettings,
    TimeUnit,
    get_redis_cache_settings,
)
from kvcache.cache.redis_client import RedisClient
from kvcache.config.logging import configure_logging, get_logger
from kvcache.exceptions import (
    CacheConnectionError,
    CacheError,
    InvalidArgumentError,
    KVCacheError,
    ListIndexOutOfRangeError,
)

logger = get_logger(__name__)

NOT_FOUND = -1

_LIST_INDEX_ERRORS = ("index out of range", "no such key")


def _require(value: Any, field: str) -> None:
    if value is None:
        raise InvalidArgumentError(f"{field} must not be None", field=field)


def _store_error(event: str, operation: str, error: Exception, **context: Any) -> KVCacheError:
    """
    Log a failed store call and build the exception to raise.

    Args:
        event: Log event name
        operation: Operation name used in the message
        error: Original exception
        **context: Extra log context (key, field, ...)

    Returns:
        CacheConnectionError for transport failures, CacheError otherwise
    """
    logger.error(event, error=str(error), **context)
    if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
        return CacheConnectionError(f"Redis {operation} failed: {error}")
    return CacheError(f"Redis {operation} failed: {error}")


class KeyValueCacheClient:
    """Façade over a Redis store exposing string, hash and list operations."""

    def __init__(self, redis_client: RedisClient, expiry: ExpiryPolicy | None = None):
        """
        Initialize cache client.

        Args:
            redis_client: Connection owner shared with other clients
            expiry: Default expiry policy (10 minutes when omitted)
        """
        self.redis = redis_client
        self._expiry = expiry or ExpiryPolicy()

    @classmethod
    def from_settings(
        cls,
        settings: RedisCacheSettings | None = None,
        setup_logs: bool = False,
    ) -> "KeyValueCacheClient":
        """
        Build a client (not yet connected) from settings.

        Args:
            settings: Cache settings, loaded from the environment when omitted
            setup_logs: Also configure structlog from the settings' log_level and json_logs

        Returns:
            KeyValueCacheClient instance
        """
        settings = settings or get_redis_cache_settings()
        if setup_logs:
            configure_logging(settings)
        redis_client = RedisClient(
            url=settings.get_effective_url(),
            max_connections=settings.max_connections,
            socket_timeout=settings.socket_timeout,
            socket_connect_timeout=settings.socket_connect_timeout,
        )
        return cls(redis_client, expiry=settings.default_expiry)

    # Lifecycle

    async def connect(self) -> None:
        """Open the underlying connection pool."""
        await self.redis.connect()

    async def disconnect(self) -> None:
        """Close the underlying connection pool."""
        await self.redis.disconnect()

    async def ping(self) -> bool:
        """Ping the store."""
        return await self.redis.ping()

    async def __aenter__(self) -> "KeyValueCacheClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    # Default expiry

    @property
    def default_expiry(self) -> ExpiryPolicy:
        return self._expiry

    @property
    def default_expiry_duration(self) -> int:
        return self._expiry.duration

    @property
    def default_expiry_unit(self) -> TimeUnit:
        return self._expiry.unit

    def with_default_expiry(
        self,
        duration: int | None = None,
        unit: TimeUnit | None = None,
    ) -> "KeyValueCacheClient":
        """
        Return a client sharing this connection with a different default expiry.

        This instance is left unchanged.

        Args:
            duration: New default duration, or None to keep the current one
            unit: New default unit, or None to keep the current one

        Returns:
            New client of the same type

        Raises:
            InvalidArgumentError: If duration is negative or unit is not a TimeUnit
        """
        try:
            expiry = self._expiry.replace(duration=duration, unit=unit)
        except ValidationError as e:
            field = "duration" if duration is not None and duration < 0 else "unit"
            value = duration if field == "duration" else unit
            raise InvalidArgumentError(f"Invalid default expiry {field}", field=field, value=value) from e
        return type(self)(self.redis, expiry=expiry)

    # Strings

    async def set_string(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
        unit: TimeUnit = TimeUnit.SECONDS,
    ) -> None:
        """
        Set a string value, optionally with an expiry.

        Args:
            key: Key
            value: Value
            ttl: Time to live expressed in ``unit`` (None or 0 = no expiration)
            unit: Unit of ``ttl``

        Raises:
            InvalidArgumentError: If key or value is None, or ttl is negative
            CacheConnectionError: If the store cannot be reached
            CacheError: If the operation fails
        """
        _require(key, "key")
        _require(value, "value")
        if ttl is not None and ttl < 0:
            raise InvalidArgumentError("ttl must not be negative", field="ttl", value=ttl)

        client = self.redis.get_client()
        try:
            if ttl:
                await client.set(key, value, px=unit.to_milliseconds(ttl))
            else:
                await client.set(key, value)
        except Exception as e:
            raise _store_error("redis_set_failed", "set", e, key=key) from e

    async def set_string_with_default_expiry(self, key: str, value: str) -> None:
        """
        Set a string value using the client's default expiry.

        Args:
            key: Key
            value: Value
        """
        await self.set_string(key, value, ttl=self._expiry.duration, unit=self._expiry.unit)

    async def get_string(self, key: str) -> str | None:
        """
        Get a string value.

        Args:
            key: Key

        Returns:
            Stored value or None if not found

        Raises:
            CacheConnectionError: If the store cannot be reached
            CacheError: If the operation fails
        """
        client = self.redis.get_client()
        try:
            return await client.get(key)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_get_failed", "get", e, key=key) from e

    async def delete_key(self, key: str) -> int:
        """
        Delete a key of any type.

        Args:
            key: Key

        Returns:
            Number of keys deleted (0 or 1)
        """
        return await self.delete_keys([key])

    async def delete_keys(self, keys: Iterable[str]) -> int:
        """
        Delete several keys in one command.

        Args:
            keys: Iterable of keys to delete (not a bare string); missing keys count as 0

        Returns:
            Number of keys deleted

        Raises:
            InvalidArgumentError: If keys is a string or contains None
        """
        if isinstance(keys, (str, bytes)):
            raise InvalidArgumentError("keys must be an iterable of keys, not a string", field="keys", value=keys)
        keys = list(keys or [])
        for key in keys:
            _require(key, "key")
        if not keys:
            return 0

        client = self.redis.get_client()
        try:
            return await client.delete(*keys)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_delete_failed", "delete", e, keys=keys) from e

    async def exists(self, key: str) -> bool:
        """
        Check if a key exists.

        Args:
            key: Key

        Returns:
            True if key exists
        """
        client = self.redis.get_client()
        try:
            return bool(await client.exists(key))
        except Exception as e:
            raise _store_error("redis_exists_failed", "exists", e, key=key) from e

    async def expire(self, key: str, ttl: int, unit: TimeUnit = TimeUnit.SECONDS) -> bool:
        """
        Set expiration on an existing key.

        Args:
            key: Key
            ttl: Time to live expressed in ``unit``
            unit: Unit of ``ttl``

        Returns:
            True if the key exists and the expiry was set
        """
        _require(key, "key")
        if ttl < 0:
            raise InvalidArgumentError("ttl must not be negative", field="ttl", value=ttl)

        client = self.redis.get_client()
        try:
            return bool(await client.pexpire(key, unit.to_milliseconds(ttl)))
        except Exception as e:
            raise _store_error("redis_expire_failed", "expire", e, key=key, ttl=ttl) from e

    # Hashes

    async def hash_set(self, hash_name: str, field: str, value: str) -> None:
        """
        Insert or update a single hash field.

        Args:
            hash_name: Hash key
            field: Field name
            value: Field value
        """
        _require(hash_name, "hash_name")
        _require(field, "field")
        _require(value, "value")

        client = self.redis.get_client()
        try:
            await client.hset(hash_name, field, value)
        except Exception as e:
            raise _store_error("redis_hset_failed", "hset", e, key=hash_name, field=field) from e

    async def hash_set_all(self, hash_name: str, mapping: Mapping[str, str]) -> None:
        """
        Insert or update every field of ``mapping``.

        Args:
            hash_name: Hash key
            mapping: Field to value mapping
        """
        _require(hash_name, "hash_name")
        if not mapping:
            return

        client = self.redis.get_client()
        try:
            await client.hset(hash_name, mapping=dict(mapping))
        except Exception as e:
            raise _store_error("redis_hset_failed", "hset", e, key=hash_name) from e

    async def hash_get(self, hash_name: str, field: str) -> str | None:
        """
        Get one hash field.

        Args:
            hash_name: Hash key
            field: Field name

        Returns:
            Field value or None if not found
        """
        if hash_name is None:
            return None

        client = self.redis.get_client()
        try:
            return await client.hget(hash_name, field)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_hget_failed", "hget", e, key=hash_name, field=field) from e

    async def hash_get_multi(self, hash_name: str, fields: Iterable[str]) -> list[str | None]:
        """
        Get several hash fields.

        Args:
            hash_name: Hash key
            fields: Field names

        Returns:
            Values aligned with ``fields``; missing fields yield None.
            Empty list when hash_name is None or no fields are given.
        """
        fields = list(fields or [])
        if hash_name is None or not fields:
            return []

        client = self.redis.get_client()
        try:
            return await client.hmget(hash_name, fields)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_hmget_failed", "hmget", e, key=hash_name) from e

    async def hash_get_all(self, hash_name: str) -> dict[str, str]:
        """
        Get every field of a hash.

        Args:
            hash_name: Hash key

        Returns:
            Field to value mapping, empty if the hash does not exist
        """
        if hash_name is None:
            return {}

        client = self.redis.get_client()
        try:
            return await client.hgetall(hash_name)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_hgetall_failed", "hgetall", e, key=hash_name) from e

    async def hash_keys(self, hash_name: str) -> set[str]:
        """
        Get the field names of a hash.

        Args:
            hash_name: Hash key

        Returns:
            Set of field names, empty if the hash does not exist
        """
        if hash_name is None:
            return set()

        client = self.redis.get_client()
        try:
            return set(await client.hkeys(hash_name))
        except Exception as e:
            raise _store_error("redis_hkeys_failed", "hkeys", e, key=hash_name) from e

    async def hash_delete_fields(self, hash_name: str, fields: Iterable[str]) -> int:
        """
        Delete hash fields.

        Args:
            hash_name: Hash key
            fields: Field names

        Returns:
            Number of fields removed
        """
        fields = list(fields or [])
        if hash_name is None or not fields:
            return 0

        client = self.redis.get_client()
        try:
            return await client.hdel(hash_name, *fields)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_hdel_failed", "hdel", e, key=hash_name) from e

    # Lists

    async def list_append(self, list_name: str, value: str) -> int:
        """
        Append a value to the tail of a list.

        Args:
            list_name: List key
            value: Value

        Returns:
            Length of the list after the push
        """
        _require(list_name, "list_name")
        _require(value, "value")

        client = self.redis.get_client()
        try:
            return await client.rpush(list_name, value)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_rpush_failed", "rpush", e, key=list_name) from e

    async def list_set_at(self, list_name: str, index: int, value: str) -> None:
        """
        Overwrite the element at ``index``.

        Args:
            list_name: List key
            index: Zero-based position, 0 <= index < length
            value: New value

        Raises:
            ListIndexOutOfRangeError: If index is negative, beyond the tail,
                or the list does not exist
        """
        _require(list_name, "list_name")
        _require(value, "value")
        if index < 0:
            raise ListIndexOutOfRangeError(list_name, index)

        client = self.redis.get_client()
        try:
            await client.lset(list_name, index, value)
        except ResponseError as e:
            if any(marker in str(e).lower() for marker in _LIST_INDEX_ERRORS):
                logger.error("redis_lset_out_of_range", key=list_name, index=index, error=str(e))
                raise ListIndexOutOfRangeError(list_name, index) from e
            raise _store_error("redis_lset_failed", "lset", e, key=list_name, index=index) from e
        except Exception as e:
            raise _store_error("redis_lset_failed", "lset", e, key=list_name, index=index) from e

    async def list_range(self, list_name: str, begin: int = 0, end: int = -1) -> list[str]:
        """
        Get a slice of a list; both bounds inclusive, -1 means the tail.

        Args:
            list_name: List key
            begin: First index
            end: Last index

        Returns:
            Values in list order, empty if the list does not exist
        """
        client = self.redis.get_client()
        try:
            return await client.lrange(list_name, begin, end)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_lrange_failed", "lrange", e, key=list_name) from e

    async def list_all(self, list_name: str) -> list[str]:
        """Get every element of a list."""
        return await self.list_range(list_name, 0, -1)

    async def list_replace_first_occurrence(self, list_name: str, old_value: str, new_value: str) -> int:
        """
        Replace the first element equal to ``old_value``.

        Reads the list then writes by index; the two commands are not atomic
        and a concurrent writer may shift elements in between.

        Args:
            list_name: List key
            old_value: Value to look for
            new_value: Replacement

        Returns:
            Index of the replaced element, or -1 if old_value is not present
        """
        _require(list_name, "list_name")
        _require(old_value, "old_value")
        _require(new_value, "new_value")

        for index, item in enumerate(await self.list_all(list_name)):
            if item == old_value:
                await self.list_set_at(list_name, index, new_value)
                return index

        logger.debug("list_value_not_found", key=list_name)
        return NOT_FOUND

    async def list_remove_occurrences(self, list_name: str, value: str, count: int = 0) -> int:
        """
        Remove elements equal to ``value``.

        Args:
            list_name: List key
            value: Value to remove
            count: 0 removes all, > 0 removes that many from the head,
                < 0 removes that many from the tail

        Returns:
            Number of elements removed
        """
        _require(list_name, "list_name")
        _require(value, "value")

        client = self.redis.get_client()
        try:
            return await client.lrem(list_name, count, value)  # type: ignore[no-any-return]
        except Exception as e:
            raise _store_error("redis_lrem_failed", "lrem", e, key=list_name) from e

    async def list_clear(self, list_name: str) -> int:
        """
        Empty a list by removing each of its distinct values.

        Returns the largest number of elements removed for a single value,
        not the total. ``["a", "a", "b"]`` yields 2.

        Args:
            list_name: List key

        Returns:
            Max per-value removal count, 0 for an absent or empty list
        """
        _require(list_name, "list_name")
        removed = 0
        for value in dict.fromkeys(await self.list_all(list_name)):
            removed = max(removed, await self.list_remove_occurrences(list_name, value))
        return removed
