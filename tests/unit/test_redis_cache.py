"""Unit tests for CacheService with a mocked redis.asyncio client."""

from unittest.mock import AsyncMock, MagicMock

import redis.asyncio as redis

from rbac.core.config import Settings
from rbac.infrastructure.cache.redis_cache import CacheService


def _cache(client: AsyncMock | None = None) -> tuple[CacheService, AsyncMock]:
    client = client or AsyncMock()
    return CacheService(redis_client=client, settings=Settings(_env_file=None)), client


async def test_get_decodes_json() -> None:
    cache, client = _cache()
    client.get.return_value = '["leads:read"]'

    assert await cache.get("permission:global:u1") == ["leads:read"]
    client.get.assert_awaited_once_with("permission:global:u1")


async def test_get_miss_returns_none() -> None:
    cache, client = _cache()
    client.get.return_value = None
    assert await cache.get("missing") is None


async def test_set_uses_ttl() -> None:
    cache, client = _cache()

    assert await cache.set("k", ["a", "b"], ttl=42) is True
    client.setex.assert_awaited_once_with("k", 42, '["a", "b"]')


async def test_connection_loss_degrades_to_miss_and_disables_cache() -> None:
    """With Redis disabled in settings, the reconnect attempt leaves the cache unavailable."""
    cache, client = _cache()
    client.get.side_effect = redis.ConnectionError("gone")

    assert await cache.get("k") is None
    assert cache.is_available() is False
    assert await cache.set("k", 1) is False


async def test_redis_error_is_logged_not_raised() -> None:
    cache, client = _cache()
    client.delete.side_effect = redis.ResponseError("WRONGTYPE")

    assert await cache.delete("k") is False
    assert cache.is_available() is True


async def test_connect_is_noop_when_disabled() -> None:
    cache = CacheService(settings=Settings(_env_file=None, redis_enabled=False))
    await cache.connect()
    assert cache.is_available() is False
    assert await cache.get("k") is None


async def test_delete_pattern_scans_and_unlinks() -> None:
    cache, client = _cache()

    async def scan_iter(match: str):
        for key in ("permission:t1:u1", "permission:t1:u2"):
            yield key

    client.scan_iter = MagicMock(side_effect=scan_iter)
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[2])
    client.pipeline = MagicMock()
    client.pipeline.return_value.__aenter__.return_value = pipe

    assert await cache.delete_pattern("permission:t1:*") == 2
    client.scan_iter.assert_called_once_with(match="permission:t1:*")
    pipe.unlink.assert_called_once_with("permission:t1:u1", "permission:t1:u2")


async def test_disconnect_closes_client() -> None:
    cache, client = _cache()
    await cache.disconnect()
    client.aclose.assert_awaited_once()
    assert cache.is_available() is False
