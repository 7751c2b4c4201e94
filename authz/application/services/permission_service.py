"""Permission application service: create with duplicate check, activate/deactivate."""

from __future__ import annotations

from authz.application.dtos import PermissionResult
from authz.application.interfaces.repositories import (
    IPermissionRepository,
    IRoleAssignmentRepository,
    IRolePermissionRepository,
    IUserRepository,
)
from authz.application.interfaces.services import ICacheService
from authz.application.services.admin_guard import AdminGuard
from authz.application.services.permission_cache import permissions_changed
from authz.domain.exceptions import ConflictError, NotFoundError, ValidationException
from authz.domain.value_objects import PermissionKey
from authz.shared.telemetry.logging import get_logger

_MSG_DUPLICATE_PERMISSION = "Permission with key '%s' already exists"

logger = get_logger(__name__)


class PermissionService:
    """Manage permissions. Keys are immutable: only display fields can change."""

    def __init__(
        self,
        permission_repo: IPermissionRepository,
        role_permission_repo: IRolePermissionRepository,
        assignment_repo: IRoleAssignmentRepository,
        user_repo: IUserRepository,
        *,
        cache: ICacheService | None = None,
        guard: AdminGuard | None = None,
    ) -> None:
        self._repo = permission_repo
        self._role_permission_repo = role_permission_repo
        self._assignment_repo = assignment_repo
        self._user_repo = user_repo
        self._cache = cache
        self._guard = guard

    async def get_by_key(self, permission_key: str) -> PermissionResult | None:
        return await self._repo.get_by_key(permission_key)

    async def list_permissions(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[PermissionResult]:
        return await self._repo.list_permissions(
            include_inactive=include_inactive, skip=skip, limit=limit
        )

    async def create_permission(
        self,
        permission_key: str,
        display_name: str,
        component_reference: str | None = None,
        *,
        actor_id: str | None = None,
    ) -> PermissionResult:
        """Create permission.

        Raises:
            ValidationException: Malformed key or empty display name.
            ConflictError: Key already exists (checked here and by the unique constraint).
        """
        if self._guard is not None:
            await self._guard.check(actor_id)
        key = PermissionKey(permission_key)
        if not display_name or not display_name.strip():
            raise ValidationException(
                "display_name must be a non-empty string", field="display_name"
            )
        if await self._repo.get_by_key(key.value):
            raise ConflictError(
                _MSG_DUPLICATE_PERMISSION % key.value,
                conflict_type="permission",
                details_extra={"permission_key": key.value},
            )
        created = await self._repo.create_permission(
            key.value, display_name.strip(), component_reference
        )
        logger.info("Created permission %s (%s)", created.permission_key, created.id)
        return created

    async def update_permission(
        self,
        permission_key: str,
        *,
        display_name: str | None = None,
        component_reference: str | None = None,
        actor_id: str | None = None,
    ) -> PermissionResult:
        """Update display_name / component_reference. Raises NotFoundError if unknown."""
        if self._guard is not None:
            await self._guard.check(actor_id)
        if display_name is not None and not display_name.strip():
            raise ValidationException(
                "display_name must be a non-empty string", field="display_name"
            )
        perm = await self._require(permission_key)
        updated = await self._repo.update_permission(
            perm.id,
            display_name=display_name.strip() if display_name is not None else None,
            component_reference=component_reference,
        )
        if updated is None:
            raise NotFoundError("permission", permission_key)
        return updated

    async def deactivate_permission(
        self, permission_key: str, *, actor_id: str | None = None
    ) -> PermissionResult:
        """Deactivate a permission; it drops out of every effective set."""
        return await self._set_active(permission_key, False, actor_id)

    async def activate_permission(
        self, permission_key: str, *, actor_id: str | None = None
    ) -> PermissionResult:
        return await self._set_active(permission_key, True, actor_id)

    async def _set_active(
        self, permission_key: str, is_active: bool, actor_id: str | None
    ) -> PermissionResult:
        if self._guard is not None:
            await self._guard.check(actor_id)
        perm = await self._require(permission_key)
        updated = await self._repo.set_active(perm.id, is_active)
        if updated is None:
            raise NotFoundError("permission", permission_key)
        await self._invalidate_permission_holders(perm.id)
        logger.info(
            "%s permission %s (by=%s)",
            "Activated" if is_active else "Deactivated",
            permission_key,
            actor_id,
        )
        return updated

    async def _require(self, permission_key: str) -> PermissionResult:
        perm = await self._repo.get_by_key(permission_key)
        if perm is None:
            raise NotFoundError("permission", permission_key)
        return perm

    async def _invalidate_permission_holders(self, permission_id: str) -> None:
        user_ids: set[str] = set()
        for role_id in await self._role_permission_repo.get_role_ids_for_permission(
            permission_id
        ):
            user_ids |= await self._assignment_repo.get_user_ids_for_role(role_id)
        await permissions_changed(self._user_repo, self._cache, user_ids)
