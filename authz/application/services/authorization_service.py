"""Authorization service: permission checks with optional caching (IPermissionResolver + cache)."""

from __future__ import annotations

from datetime import datetime

from authz.application.interfaces.repositories import IUserRepository
from authz.application.interfaces.services import ICacheService, IPermissionResolver
from authz.application.services.permission_cache import (
    all_permissions_pattern,
    as_of_bucket,
    invalidate_user_permissions,
    permission_cache_key,
)
from authz.domain.exceptions import AuthorizationException
from authz.domain.value_objects import PermissionKey
from authz.shared.telemetry.logging import get_logger
from authz.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class AuthorizationService:
    """Caller-facing permission checks.

    One parameterized has_permission(user, key) replaces per-permission
    check functions. Callers pass user_id and as_of explicitly; the cache,
    when given, is keyed per user, so results are never shared across users.

    With user_repo, cache keys include the user's permission revision, read
    on every check. Writes in any session bump that revision, so a cache
    never serves a set older than the last committed change. Without
    user_repo the revision is fixed at 0 and entries stay valid until this
    cache is invalidated or they expire.

    Checks never raise: any failure (resolver or cache) denies, and a set
    from a failed resolution is not cached.
    """

    def __init__(
        self,
        permission_resolver: IPermissionResolver,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
        bucket_seconds: int = 60,
        user_repo: IUserRepository | None = None,
    ) -> None:
        self.permission_resolver = permission_resolver
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.bucket_seconds = bucket_seconds
        self.user_repo = user_repo

    async def resolve_permissions(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Return permission keys held by user_id at as_of. Uses cache if available."""
        moment = utc_now() if as_of is None else as_of
        key = await self._cache_key(user_id, moment)
        if key is not None:
            cached = await self._cache_get(key)
            if cached is not None:
                return frozenset(cached)

        try:
            permissions = await self.permission_resolver.resolve_permissions_or_raise(
                user_id, moment
            )
        except Exception:
            logger.warning(
                "Permission resolver raised for user %r; denying", user_id, exc_info=True
            )
            return frozenset()

        if key is not None:
            await self._cache_set(key, sorted(permissions))
        return frozenset(permissions)

    async def has_permission(
        self,
        user_id: str,
        permission_key: str,
        as_of: datetime | None = None,
    ) -> bool:
        """Return True if user_id holds permission_key at as_of."""
        if not PermissionKey.is_valid(permission_key):
            return False
        permissions = await self.resolve_permissions(user_id, as_of)
        return permission_key in permissions

    async def require_permission(
        self,
        user_id: str,
        permission_key: str,
        as_of: datetime | None = None,
    ) -> None:
        """Raise a generic AuthorizationException if user lacks permission_key."""
        if not await self.has_permission(user_id, permission_key, as_of):
            raise AuthorizationException()

    async def invalidate_user_cache(self, user_id: str) -> None:
        """Invalidate cached permissions for one user."""
        await invalidate_user_permissions(self.cache, [user_id])

    async def invalidate_all(self) -> int:
        """Invalidate every cached permission set held by this cache."""
        if self.cache is None or not self.cache.is_available():
            return 0
        return await self.cache.delete_pattern(all_permissions_pattern())

    async def _cache_key(self, user_id: object, as_of: object) -> str | None:
        """Key for this check, or None to bypass the cache."""
        if self.cache is None or not self.cache.is_available():
            return None
        if not isinstance(user_id, str) or not isinstance(as_of, datetime):
            return None
        revision = await self._revision(user_id)
        if revision is None:
            return None
        try:
            return permission_cache_key(
                user_id, revision, as_of_bucket(as_of, self.bucket_seconds)
            )
        except ValueError:
            return None

    async def _revision(self, user_id: str) -> int | None:
        if self.user_repo is None:
            return 0
        try:
            return await self.user_repo.get_permission_revision(user_id)
        except Exception:
            logger.warning(
                "Permission revision lookup failed for %r; bypassing cache",
                user_id,
                exc_info=True,
            )
            return None

    async def _cache_get(self, key: str) -> list[str] | None:
        try:
            return await self.cache.get(key)
        except Exception:
            logger.warning("Permission cache get failed for %s", key, exc_info=True)
            return None

    async def _cache_set(self, key: str, value: list[str]) -> None:
        try:
            await self.cache.set(key, value, ttl=self.cache_ttl)
        except Exception:
            logger.warning("Permission cache set failed for %s", key, exc_info=True)
