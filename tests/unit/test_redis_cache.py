"""Tests for RedisCacheService with a mocked redis client."""

import json
from unittest.mock import AsyncMock

import redis.asyncio as redis

from authz.core.config import Settings
from authz.infrastructure.cache import RedisCacheService


def _service(client: AsyncMock) -> RedisCacheService:
    return RedisCacheService(redis_client=client, settings=Settings(_env_file=None))


async def test_unconnected_service_is_a_no_op() -> None:
    service = RedisCacheService(settings=Settings(_env_file=None))

    assert not service.is_available()
    assert await service.get("k") is None
    assert await service.set("k", [1]) is False
    assert await service.delete_pattern("permission:*") == 0


async def test_get_decodes_json() -> None:
    client = AsyncMock()
    client.get.return_value = json.dumps(["REPORTS"])

    assert await _service(client).get("permission:u1:1") == ["REPORTS"]
    client.get.assert_awaited_once_with("permission:u1:1")


async def test_get_miss() -> None:
    client = AsyncMock()
    client.get.return_value = None
    assert await _service(client).get("k") is None


async def test_set_uses_setex_with_ttl() -> None:
    client = AsyncMock()

    assert await _service(client).set("permission:u1:1", ["A"], ttl=30)

    client.setex.assert_awaited_once_with("permission:u1:1", 30, json.dumps(["A"]))


async def test_delete_reports_whether_key_existed() -> None:
    client = AsyncMock()
    client.delete.return_value = 0
    assert await _service(client).delete("k") is False


async def test_delete_pattern_scans_and_unlinks() -> None:
    keys = [f"permission:u1:{i}" for i in range(3)]

    async def scan_iter(match: str):
        assert match == "permission:u1:*"
        for key in keys:
            yield key

    client = AsyncMock()
    client.scan_iter = scan_iter
    client.unlink.return_value = 3

    assert await _service(client).delete_pattern("permission:u1:*") == 3
    client.unlink.assert_awaited_once_with(*keys)


async def test_connection_error_reconnects_once_then_retries() -> None:
    stale = AsyncMock()
    stale.get.side_effect = redis.ConnectionError("gone")
    fresh = AsyncMock()
    fresh.get.return_value = json.dumps(["A"])
    service = _service(stale)

    async def connect() -> None:
        service.redis = fresh
        service._connected = True

    service.connect = connect

    assert await service.get("k") == ["A"]
    stale.aclose.assert_awaited_once()


async def test_failed_reconnect_degrades_to_miss() -> None:
    stale = AsyncMock()
    stale.setex.side_effect = redis.TimeoutError("slow")
    service = _service(stale)
    service.connect = AsyncMock()

    assert await service.set("k", ["A"]) is False
    assert not service.is_available()


async def test_other_redis_errors_are_logged_not_raised() -> None:
    client = AsyncMock()
    client.get.side_effect = redis.ResponseError("WRONGTYPE")
    service = _service(client)

    assert await service.get("k") is None
    assert service.is_available()


async def test_disconnect() -> None:
    client = AsyncMock()
    service = _service(client)

    await service.disconnect()

    client.aclose.assert_awaited_once()
    assert not service.is_available()
