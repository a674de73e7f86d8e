"""
Redis connection management with connection pooling.
"""

from typing import Any

from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kvcache.config.logging import get_logger
from kvcache.exceptions import CacheConnectionError, CacheError

logger = get_logger(__name__)


class RedisClient:
    """Owns the async connection pool shared by cache clients."""

    def __init__(
        self,
        url: str,
        max_connections: int = 50,
        decode_responses: bool = True,
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
    ):
        """
        Initialize Redis client.

        Args:
            url: Redis connection URL
            max_connections: Maximum number of connections
            decode_responses: Decode responses to strings
            socket_timeout: Socket timeout in seconds
            socket_connect_timeout: Socket connect timeout in seconds
        """
        self.url = url
        self.max_connections = max_connections
        self.decode_responses = decode_responses
        self.socket_timeout = socket_timeout
        self.socket_connect_timeout = socket_connect_timeout

        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None

    @property
    def is_connected(self) -> bool:
        """Whether connect() has completed and disconnect() has not been called."""
        return self._client is not None

    async def connect(self) -> None:
        """
        Connect to Redis server.

        Raises:
            CacheConnectionError: If connection fails
        """
        try:
            self._pool = ConnectionPool.from_url(
                self.url,
                max_connections=self.max_connections,
                decode_responses=self.decode_responses,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_connect_timeout,
            )

            self._client = Redis(connection_pool=self._pool)

            await self._client.ping()

            logger.info("redis_connected", url=self.url)

        except Exception as e:
            logger.error("redis_connection_failed", error=str(e), url=self.url)
            raise CacheConnectionError(f"Failed to connect to Redis: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from Redis server."""
        if self._client:
            await self._client.aclose()
            self._client = None

        if self._pool:
            await self._pool.aclose()
            self._pool = None

        logger.info("redis_disconnected")

    def get_client(self) -> Redis:
        """
        Get Redis client.

        Returns:
            Redis client instance

        Raises:
            CacheError: If not connected
        """
        if not self._client:
            raise CacheError("Redis client not connected. Call connect() first.")
        return self._client

    async def ping(self) -> bool:
        """
        Ping Redis server.

        Returns:
            True if ping successful

        Raises:
            CacheConnectionError: If the server cannot be reached
            CacheError: If ping fails for another reason
        """
        client = self.get_client()
        try:
            result: bool = await client.ping()
            return result
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error("redis_ping_failed", error=str(e))
            raise CacheConnectionError(f"Redis ping failed: {e}") from e
        except Exception as e:
            logger.error("redis_ping_failed", error=str(e))
            raise CacheError(f"Redis ping failed: {e}") from e

    async def __aenter__(self) -> "RedisClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()
