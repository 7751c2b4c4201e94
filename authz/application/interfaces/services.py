"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


# Cache service interface
class ICacheService(Protocol):
    """Protocol for cache backends (Redis, in-memory session cache)."""

    def is_available(self) -> bool:
        """Return True if the cache is connected and usable."""

    async def get(self, key: str) -> Any | None:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if removed."""

    async def delete_pattern(self, pattern: str) -> int:
        """Remove all keys matching a glob pattern; return count removed."""


# Permission resolver interface
class IPermissionResolver(Protocol):
    """Protocol for resolving a user's effective permission set (used by AuthorizationService)."""

    async def resolve_permissions(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Return permission keys in effect at as_of. Never raises (fail-closed)."""

    async def resolve_permissions_or_raise(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Like resolve_permissions, but storage failures raise instead of denying."""
