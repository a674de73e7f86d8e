"""
kvcache: string, hash and list operations over a Redis store.
"""

from kvcache.cache import (
    NOT_FOUND,
    ExpiryPolicy,
    KeyValueCacheClient,
    RedisCacheSettings,
    RedisClient,
    TimeUnit,
    get_redis_cache_settings,
)
from kvcache.exceptions import (
    CacheConnectionError,
    CacheError,
    InvalidArgumentError,
    KVCacheError,
    ListIndexOutOfRangeError,
)

__all__ = [
    "KeyValueCacheClient",
    "NOT_FOUND",
    "RedisClient",
    "ExpiryPolicy",
    "TimeUnit",
    "RedisCacheSettings",
    "get_redis_cache_settings",
    "KVCacheError",
    "CacheError",
    "CacheConnectionError",
    "InvalidArgumentError",
    "ListIndexOutOfRangeError",
]
