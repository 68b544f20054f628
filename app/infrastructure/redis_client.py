"""Redis client helpers with connection pooling."""

from __future__ import annotations

from app.config import Settings, get_settings

REDIS_DISABLED_URL = "memory://"
DEFAULT_REDIS_MAX_CONNECTIONS = 20
DEFAULT_REDIS_CONNECT_TIMEOUT_SECONDS = 2.0
DEFAULT_REDIS_HEALTH_CHECK_SECONDS = 30

_async_client = None


def get_redis_url(settings: Settings | None = None) -> str | None:
    """Return the configured Redis URL, or ``None`` when Redis is disabled."""

    url = (settings or get_settings()).redis_url
    if not url or url.strip().lower() == REDIS_DISABLED_URL:
        return None
    return url.strip()


def get_async_redis_client(settings: Settings | None = None):
    url = get_redis_url(settings)
    if not url:
        return None

    global _async_client
    if _async_client is None:
        import redis.asyncio as redis

        pool = redis.ConnectionPool.from_url(
            url,
            max_connections=DEFAULT_REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=DEFAULT_REDIS_CONNECT_TIMEOUT_SECONDS,
            health_check_interval=DEFAULT_REDIS_HEALTH_CHECK_SECONDS,
            retry_on_timeout=True,
            decode_responses=True,
        )
        _async_client = redis.Redis(connection_pool=pool)
    return _async_client


async def close_async_redis_client() -> None:
    global _async_client
    if _async_client is not None:
        await _async_client.aclose()
        _async_client = None


__all__ = [
    "REDIS_DISABLED_URL",
    "close_async_redis_client",
    "get_async_redis_client",
    "get_redis_url",
]
