"""Permission cache backends: Redis (shared) and in-memory (per session)."""

from authz.infrastructure.cache.redis_cache import RedisCacheService
from authz.infrastructure.cache.session_cache import SessionPermissionCache

__all__ = ["RedisCacheService", "SessionPermissionCache"]
