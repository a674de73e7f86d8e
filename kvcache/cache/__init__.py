"""
Redis-backed key-value cache client.
"""

from kvcache.cache.client import NOT_FOUND, KeyValueCacheClient
from kvcache.cache.config import (
    ExpiryPolicy,
    RedisCacheSettings,
    TimeUnit,
    get_redis_cache_settings,
)
from kvcache.cache.redis_client import RedisClient

__all__ = [
    "KeyValueCacheClient",
    "NOT_FOUND",
    "RedisClient",
    "ExpiryPolicy",
    "TimeUnit",
    "RedisCacheSettings",
    "get_redis_cache_settings",
]
