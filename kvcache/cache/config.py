"""
Configuration settings for the key-value cache client.

Defines connection settings and the default expiry policy.
"""

from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeUnit(str, Enum):
    """Units accepted for key expiry."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    def to_milliseconds(self, duration: int) -> int:
        """
        Convert a duration in this unit to milliseconds.

        Args:
            duration: Duration expressed in this unit

        Returns:
            Duration in milliseconds
        """
        return duration * _MILLISECONDS_PER_UNIT[self]


_MILLISECONDS_PER_UNIT = {
    TimeUnit.MILLISECONDS: 1,
    TimeUnit.SECONDS: 1000,
    TimeUnit.MINUTES: 60 * 1000,
    TimeUnit.HOURS: 60 * 60 * 1000,
    TimeUnit.DAYS: 24 * 60 * 60 * 1000,
}


class ExpiryPolicy(BaseModel):
    """Immutable default expiry applied by the *_with_default_expiry operations."""

    model_config = ConfigDict(frozen=True)

    duration: int = Field(
        default=10,
        ge=0,
        description="Expiry duration (0 = no expiration)",
    )

    unit: TimeUnit = Field(
        default=TimeUnit.MINUTES,
        description="Unit of the expiry duration",
    )

    def to_milliseconds(self) -> int:
        """Expiry in milliseconds."""
        return self.unit.to_milliseconds(self.duration)

    def replace(self, duration: int | None = None, unit: TimeUnit | None = None) -> "ExpiryPolicy":
        """
        Build a new policy with some fields replaced.

        Args:
            duration: New duration, or None to keep the current one
            unit: New unit, or None to keep the current one

        Returns:
            New validated policy
        """
        return ExpiryPolicy(
            duration=self.duration if duration is None else duration,
            unit=self.unit if unit is None else unit,
        )


class RedisCacheSettings(BaseSettings):
    """Settings for the key-value cache client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KVCACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Connection settings
    url: str | None = Field(
        default=None,
        description="Redis connection URL (overrides host/port/db/password when set)",
    )

    host: str = Field(
        default="localhost",
        description="Redis host",
    )

    port: int = Field(
        default=6379,
        ge=1,
        le=65535,
        description="Redis port",
    )

    db: int = Field(
        default=0,
        ge=0,
        le=15,
        description="Redis database number",
    )

    password: str | None = Field(
        default=None,
        description="Redis password",
    )

    # Connection pool settings
    max_connections: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum number of connections in pool",
    )

    socket_timeout: float = Field(
        default=5.0,
        ge=0.1,
        description="Socket timeout in seconds",
    )

    socket_connect_timeout: float = Field(
        default=5.0,
        ge=0.1,
        description="Socket connect timeout in seconds",
    )

    # Expiry defaults
    default_expiry_duration: int = Field(
        default=10,
        ge=0,
        description="Default expiry duration (0 = no expiration)",
    )

    default_expiry_unit: TimeUnit = Field(
        default=TimeUnit.MINUTES,
        description="Unit of the default expiry duration",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON",
    )

    @property
    def connection_url(self) -> str:
        """
        Build Redis connection URL from components.

        Returns:
            Redis connection URL
        """
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"

    def get_effective_url(self) -> str:
        """
        Get the effective Redis URL (prefer url if set, otherwise build from components).

        Returns:
            Redis connection URL
        """
        if self.url:
            return self.url
        return self.connection_url

    @property
    def default_expiry(self) -> ExpiryPolicy:
        """Default expiry policy built from settings."""
        return ExpiryPolicy(duration=self.default_expiry_duration, unit=self.default_expiry_unit)


@lru_cache
def get_redis_cache_settings() -> RedisCacheSettings:
    """
    Get cached cache settings instance.

    Returns:
        RedisCacheSettings: Cached settings instance
    """
    return RedisCacheSettings()
