"""Redis-backed permission cache shared across processes.

Values are JSON; permission sets are stored as sorted lists of keys. A
connection error triggers one reconnect-and-retry; any other Redis error,
or a second failure, is logged and treated as a miss so authorization
falls back to the stores.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis

from authz.core.config import Settings, get_settings
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_UNLINK_CHUNK = 500


class RedisCacheService:
    """Async Redis cache (implements ICacheService).

    Call connect() at startup and disconnect() at shutdown. Until connect()
    succeeds, is_available() is False and every operation is a no-op.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional pre-built client (tests, DI). Treated as connected.
            settings: Connection settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Open the Redis connection; on failure the cache stays disabled."""
        if self.redis is not None:
            return
        password = self.settings.redis_password
        client = redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Permission cache disabled.", e)
            await client.aclose()
            return
        self.redis = client
        self._connected = True
        logger.info(
            "Redis permission cache connected: %s:%s",
            self.settings.redis_host,
            self.settings.redis_port,
        )

    async def disconnect(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            logger.info("Redis permission cache disconnected")
        self.redis = None
        self._connected = False

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                logger.debug("Ignoring error while closing stale Redis client")
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    async def _call[T](
        self, op: str, target: str, action: Callable[[], Awaitable[T]], default: T
    ) -> T:
        """Run action against Redis, retrying once after a reconnect."""
        if not self.is_available():
            return default
        try:
            return await action()
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect():
                try:
                    return await action()
                except redis.RedisError:
                    logger.exception("Cache %s error for %s after reconnect", op, target)
                    return default
            logger.warning("Cache %s unavailable for %s (Redis disconnected)", op, target)
            return default
        except redis.RedisError:
            logger.exception("Cache %s error for %s", op, target)
            return default

    async def get(self, key: str) -> Any | None:
        """Return the JSON-decoded value for key, or None on miss or error."""

        async def action() -> Any | None:
            raw = await self.redis.get(key)
            if raw is None:
                logger.debug("Cache MISS: %s", key)
                return None
            logger.debug("Cache HIT: %s", key)
            return json.loads(raw)

        return await self._call("get", key, action, None)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value (JSON-serializable) under key for ttl seconds."""
        serialized = json.dumps(value)

        async def action() -> bool:
            await self.redis.setex(key, ttl, serialized)
            logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
            return True

        return await self._call("set", key, action, False)

    async def delete(self, key: str) -> bool:
        async def action() -> bool:
            return bool(await self.redis.delete(key))

        return await self._call("delete", key, action, False)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching pattern with SCAN + batched UNLINK (never KEYS)."""

        async def action() -> int:
            deleted = 0
            chunk: list[str] = []
            async for key in self.redis.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= _UNLINK_CHUNK:
                    deleted += await self.redis.unlink(*chunk)
                    chunk = []
            if chunk:
                deleted += await self.redis.unlink(*chunk)
            if deleted:
                logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
            return deleted

        return await self._call("delete_pattern", pattern, action, 0)
