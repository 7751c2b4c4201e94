"""Identity store service: look up, provision and deactivate principals.

Credentials are never checked here. Users arrive already authenticated by
an external collaborator (ERP, AD, LDAP); the first successful login
provisions a record, and access is withdrawn by deactivation, never by
deletion, so assignment history keeps its references.
"""

from __future__ import annotations

from authz.application.dtos import UserResult
from authz.application.interfaces.repositories import IUserRepository
from authz.application.interfaces.services import ICacheService
from authz.application.services.admin_guard import AdminGuard
from authz.application.services.permission_cache import permissions_changed
from authz.domain.exceptions import ConflictError, NotFoundError
from authz.domain.value_objects import Username
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Identity store operations used by the core and by provisioning."""

    def __init__(
        self,
        user_repo: IUserRepository,
        *,
        cache: ICacheService | None = None,
        guard: AdminGuard | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._cache = cache
        self._guard = guard

    async def get_user(self, user_id: str) -> UserResult | None:
        return await self._user_repo.get_user(user_id)

    async def is_active(self, user_id: str) -> bool:
        return await self._user_repo.is_active(user_id)

    async def get_by_username(self, username: str) -> UserResult | None:
        """Return user by username, compared case-insensitively."""
        return await self._user_repo.get_by_username(username)

    async def provision_user(
        self, username: str, display_name: str | None = None
    ) -> UserResult:
        """Return the user for username, creating it on first sight.

        Idempotent: 'JDoe' and 'jdoe' resolve to the same record. A concurrent
        provision of the same name loses the insert race and returns the
        winner's record. An existing deactivated user is returned as-is, not
        reactivated.
        """
        name = Username(username)
        existing = await self._user_repo.get_by_username(name.value)
        if existing is not None:
            return existing
        try:
            created = await self._user_repo.create_user(name.value, display_name)
        except ConflictError:
            existing = await self._user_repo.get_by_username(name.value)
            if existing is None:
                raise
            return existing
        logger.info("Provisioned user %s (%s)", created.id, created.username)
        return created

    async def deactivate_user(
        self, user_id: str, *, actor_id: str | None = None
    ) -> UserResult:
        """Deactivate a user; every authorization check for them then denies."""
        return await self._set_active(user_id, False, actor_id)

    async def activate_user(
        self, user_id: str, *, actor_id: str | None = None
    ) -> UserResult:
        return await self._set_active(user_id, True, actor_id)

    async def _set_active(
        self, user_id: str, is_active: bool, actor_id: str | None
    ) -> UserResult:
        if self._guard is not None:
            await self._guard.check(actor_id)
        updated = await self._user_repo.set_active(user_id, is_active)
        if updated is None:
            raise NotFoundError("user", user_id)
        await permissions_changed(self._user_repo, self._cache, [user_id])
        logger.info(
            "%s user %s (by=%s)",
            "Activated" if is_active else "Deactivated",
            user_id,
            actor_id,
        )
        return updated
