from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from app.core.cache import CacheService, create_redis_client


class TestCacheService:
    @pytest.mark.asyncio
    async def test_without_client_everything_is_a_noop(self):
        cache = CacheService()

        assert not cache.is_available
        assert await cache.get("k") is None
        assert await cache.get_json("k") is None
        await cache.set("k", "v", ttl=10)
        await cache.set_json("k", [1, 2])
        await cache.delete("k")

    @pytest.mark.asyncio
    async def test_set_json_with_ttl_uses_setex(self, mock_cache, mock_redis):
        agent_id = uuid4()

        await mock_cache.set_json("rankings", [{"id": agent_id}], ttl=300)

        mock_redis.setex.assert_awaited_once_with(
            "rankings", 300, f'[{{"id": "{agent_id}"}}]'
        )

    @pytest.mark.asyncio
    async def test_set_without_ttl_uses_set(self, mock_cache, mock_redis):
        await mock_cache.set("k", "v")

        mock_redis.set.assert_awaited_once_with("k", "v")
        mock_redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_json_decodes_lists(self, mock_cache, mock_redis):
        mock_redis.get.return_value = '[{"rank": 1}, {"rank": 2}]'

        assert await mock_cache.get_json("k") == [{"rank": 1}, {"rank": 2}]

    @pytest.mark.asyncio
    async def test_get_json_ignores_corrupt_payload(self, mock_cache, mock_redis):
        mock_redis.get.return_value = "{not json"

        assert await mock_cache.get_json("k") is None

    @pytest.mark.asyncio
    async def test_redis_errors_are_swallowed(self, mock_cache, mock_redis):
        mock_redis.get.side_effect = ConnectionError("gone")
        mock_redis.delete.side_effect = ConnectionError("gone")

        assert await mock_cache.get("k") is None
        await mock_cache.delete("k")


class TestCreateRedisClient:
    @pytest.mark.asyncio
    async def test_returns_none_when_unreachable(self):
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("refused")
        with patch("app.core.cache.Redis.from_url", return_value=client):
            assert await create_redis_client() is None

    @pytest.mark.asyncio
    async def test_returns_client_after_ping(self, mock_redis):
        with patch("app.core.cache.Redis.from_url", return_value=mock_redis):
            assert await create_redis_client() is mock_redis
        mock_redis.ping.assert_awaited_once()
