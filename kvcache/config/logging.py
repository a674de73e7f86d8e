"""
Structured logging for kvcache.

Events are emitted through structlog with snake_case names and keyword
context. Store URLs are masked before rendering.
"""

import logging
import re
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from kvcache.cache.config import RedisCacheSettings

_URL_CREDENTIALS = re.compile(r"(?P<scheme>rediss?|unix)://(?P<userinfo>[^@/]*)@")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with ``app="kvcache"``."""
    event_dict["app"] = "kvcache"
    return event_dict


def redact_url_credentials(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Mask the userinfo part of store URLs logged under the ``url`` key.

    Args:
        logger: Logger instance
        method_name: Method name
        event_dict: Event dictionary

    Returns:
        Updated event dictionary
    """
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = _URL_CREDENTIALS.sub(r"\g<scheme>://***@", url)
    return event_dict


def build_processors(json_logs: bool) -> list[Processor]:
    """
    Processor chain for the given output format.

    Args:
        json_logs: JSON lines when True, colored console output otherwise

    Returns:
        Ordered structlog processors, renderer last
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        redact_url_credentials,
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return processors


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Route structlog through stdlib logging on stdout.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        json_logs: Render JSON (True) or console-friendly output (False)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)

    structlog.configure(
        processors=build_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: "RedisCacheSettings") -> None:
    """
    Apply the ``KVCACHE_LOG_LEVEL`` / ``KVCACHE_JSON_LOGS`` settings.

    Args:
        settings: Cache settings carrying the logging fields
    """
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)
