"""Invalidation of cached provider data kept in Redis."""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

PROVIDER_PROFILE_KEY = "provider:profile:{provider_id}"
PROVIDER_AVAILABILITY_KEY = "provider:availability:{provider_id}"
PROVIDER_TIMESLOTS_PATTERN = "provider:timeslots:{provider_id}:*"


class RedisProviderCache:
    """Drop the cached profile, availability and time slots of a provider.

    Without a Redis client there is nothing to invalidate and calls are no-ops.
    """

    def __init__(self, client: Any | None) -> None:
        self._client = client

    async def invalidate_provider(self, provider_id: str) -> None:
        if self._client is None:
            logger.debug("No Redis cache configured; skipping invalidation for %s", provider_id)
            return

        keys = [
            PROVIDER_PROFILE_KEY.format(provider_id=provider_id),
            PROVIDER_AVAILABILITY_KEY.format(provider_id=provider_id),
        ]
        try:
            async for key in self._client.scan_iter(
                match=PROVIDER_TIMESLOTS_PATTERN.format(provider_id=provider_id)
            ):
                keys.append(key)
            removed = await self._client.delete(*keys)
        except RedisError as exc:
            logger.warning("Could not invalidate cache for provider %s: %s", provider_id, exc)
            return
        logger.debug("Invalidated %s cache keys for provider %s", removed, provider_id)


__all__ = ["RedisProviderCache"]
