"""Tests for Redis-backed provider cache invalidation."""

from __future__ import annotations

import fnmatch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.infrastructure.cache import RedisProviderCache


class FakeRedis:
    def __init__(self, keys: set[str], *, fail: bool = False) -> None:
        self.keys = keys
        self.fail = fail

    async def scan_iter(self, match: str):
        if self.fail:
            raise RedisConnectionError("connection refused")
        for key in sorted(self.keys):
            if fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys: str) -> int:
        removed = self.keys.intersection(keys)
        self.keys.difference_update(removed)
        return len(removed)


@pytest.mark.asyncio
async def test_invalidation_removes_profile_availability_and_slots() -> None:
    client = FakeRedis(
        {
            "provider:profile:p-1",
            "provider:availability:p-1",
            "provider:timeslots:p-1:2024-05-06",
            "provider:timeslots:p-1:2024-05-07",
            "provider:profile:p-2",
        }
    )

    await RedisProviderCache(client).invalidate_provider("p-1")

    assert client.keys == {"provider:profile:p-2"}


@pytest.mark.asyncio
async def test_redis_errors_are_logged_not_raised(caplog) -> None:
    client = FakeRedis({"provider:profile:p-1"}, fail=True)

    with caplog.at_level("WARNING"):
        await RedisProviderCache(client).invalidate_provider("p-1")

    assert client.keys == {"provider:profile:p-1"}
    assert "Could not invalidate cache for provider p-1" in caplog.text


@pytest.mark.asyncio
async def test_missing_client_is_a_no_op() -> None:
    await RedisProviderCache(None).invalidate_provider("p-1")
