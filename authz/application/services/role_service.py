"""Role catalog: roles and the permissions bundled into them."""

from __future__ import annotations

from datetime import datetime

from authz.application.dtos import PermissionResult, RolePermissionResult, RoleResult
from authz.application.interfaces.repositories import (
    IPermissionRepository,
    IRoleAssignmentRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from authz.application.interfaces.services import ICacheService
from authz.application.services.admin_guard import AdminGuard
from authz.application.services.permission_cache import permissions_changed
from authz.domain.exceptions import ConflictError, InactiveEntityError, NotFoundError
from authz.domain.value_objects import RoleName
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleService:
    """Create, deactivate and query roles; link permissions to them.

    Roles are never physically removed. Deactivating one drops its
    permissions from every holder's effective set immediately, while its
    role-permission links and assignment history stay in place.
    """

    def __init__(
        self,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        role_permission_repo: IRolePermissionRepository,
        assignment_repo: IRoleAssignmentRepository,
        user_repo: IUserRepository,
        *,
        cache: ICacheService | None = None,
        guard: AdminGuard | None = None,
    ) -> None:
        self._role_repo = role_repo
        self._permission_repo = permission_repo
        self._role_permission_repo = role_permission_repo
        self._assignment_repo = assignment_repo
        self._user_repo = user_repo
        self._cache = cache
        self._guard = guard

    async def get_role(self, role_id: str) -> RoleResult | None:
        return await self._role_repo.get_role(role_id)

    async def get_role_by_name(self, name: str) -> RoleResult | None:
        """Return the active role with this name (case-insensitive)."""
        return await self._role_repo.get_active_by_name(name)

    async def list_roles(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[RoleResult]:
        return await self._role_repo.list_roles(
            include_inactive=include_inactive, skip=skip, limit=limit
        )

    async def permissions_of_role(
        self, role_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Return active permission keys linked to an active role.

        Role-permission links have no temporal bound, so as_of does not
        filter links; it is accepted so every fetch in a resolution shares
        one timestamp. Empty when the role is missing or inactive. Never
        raises: storage failures are logged and yield the empty set.
        """
        try:
            return await self.permissions_of_role_or_raise(role_id, as_of)
        except Exception:
            logger.warning(
                "permissions_of_role failed for %r; denying", role_id, exc_info=True
            )
            return frozenset()

    async def permissions_of_role_or_raise(
        self, role_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Like permissions_of_role, but storage failures propagate."""
        role = await self._role_repo.get_role(role_id)
        if role is None or not role.is_active:
            return frozenset()
        permissions = await self._role_permission_repo.get_permissions_for_role(role_id)
        return frozenset(p.permission_key for p in permissions if p.is_active)

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permission_keys: list[str] | None = None,
        *,
        actor_id: str | None = None,
    ) -> RoleResult:
        """Create a role and optionally link permissions by key.

        Every key is checked before anything is written, so a bad key
        leaves no half-built role behind.

        Raises:
            ValidationException: Empty or overlong name.
            ConflictError: An active role already has this name.
            NotFoundError: A permission key does not exist.
            InactiveEntityError: A permission is deactivated.
        """
        if self._guard is not None:
            await self._guard.check(actor_id)
        role_name = RoleName(name)
        if await self._role_repo.get_active_by_name(role_name.value):
            raise ConflictError(
                f"Role with name '{role_name.value}' already exists",
                conflict_type="role",
                details_extra={"name": role_name.value},
            )
        permissions = [
            await self._require_active_permission(key)
            for key in dict.fromkeys(permission_keys or [])
        ]
        created = await self._role_repo.create_role(role_name.value, description)
        for perm in permissions:
            await self._role_permission_repo.assign_permission_to_role(
                created.id, perm.id, assigned_by=actor_id
            )
        logger.info(
            "Created role %s (%s) with %s permission(s)",
            created.id,
            created.name,
            len(permissions),
        )
        return created

    async def deactivate_role(
        self, role_id: str, *, actor_id: str | None = None
    ) -> RoleResult:
        """Deactivate a role. Raises NotFoundError if it does not exist."""
        if self._guard is not None:
            await self._guard.check(actor_id)
        updated = await self._role_repo.set_active(role_id, False)
        if updated is None:
            raise NotFoundError("role", role_id)
        await self._invalidate_role_holders(role_id)
        logger.info("Deactivated role %s (by=%s)", role_id, actor_id)
        return updated

    async def activate_role(
        self, role_id: str, *, actor_id: str | None = None
    ) -> RoleResult:
        """Reactivate a role.

        Raises:
            NotFoundError: Role does not exist.
            ConflictError: Another active role now holds the same name.
        """
        if self._guard is not None:
            await self._guard.check(actor_id)
        role = await self._role_repo.get_role(role_id)
        if role is None:
            raise NotFoundError("role", role_id)
        if role.is_active:
            return role
        clash = await self._role_repo.get_active_by_name(role.name)
        if clash is not None and clash.id != role_id:
            raise ConflictError(
                f"Role with name '{role.name}' already exists",
                conflict_type="role",
                details_extra={"name": role.name, "role_id": clash.id},
            )
        updated = await self._role_repo.set_active(role_id, True)
        if updated is None:
            raise NotFoundError("role", role_id)
        await self._invalidate_role_holders(role_id)
        logger.info("Activated role %s (by=%s)", role_id, actor_id)
        return updated

    async def assign_permission(
        self, role_id: str, permission_key: str, *, actor_id: str | None = None
    ) -> RolePermissionResult:
        """Link a permission to a role.

        Raises:
            NotFoundError: Role or permission does not exist.
            InactiveEntityError: Role or permission is deactivated.
            ConflictError: Permission already linked to the role.
        """
        if self._guard is not None:
            await self._guard.check(actor_id)
        role = await self._role_repo.get_role(role_id)
        if role is None:
            raise NotFoundError("role", role_id)
        if not role.is_active:
            raise InactiveEntityError("role", role_id)
        perm = await self._require_active_permission(permission_key)
        link = await self._role_permission_repo.assign_permission_to_role(
            role_id, perm.id, assigned_by=actor_id
        )
        await self._invalidate_role_holders(role_id)
        return link

    async def remove_permission(
        self, role_id: str, permission_key: str, *, actor_id: str | None = None
    ) -> None:
        """Unlink a permission from a role. Raises NotFoundError if not linked."""
        if self._guard is not None:
            await self._guard.check(actor_id)
        perm = await self._permission_repo.get_by_key(permission_key)
        if perm is None:
            raise NotFoundError("permission", permission_key)
        removed = await self._role_permission_repo.remove_permission_from_role(
            role_id, perm.id
        )
        if not removed:
            raise NotFoundError("role_permission", f"{role_id}/{permission_key}")
        await self._invalidate_role_holders(role_id)

    async def _require_active_permission(self, permission_key: str) -> PermissionResult:
        perm = await self._permission_repo.get_by_key(permission_key)
        if perm is None:
            raise NotFoundError("permission", permission_key)
        if not perm.is_active:
            raise InactiveEntityError("permission", permission_key)
        return perm

    async def _invalidate_role_holders(self, role_id: str) -> None:
        user_ids = await self._assignment_repo.get_user_ids_for_role(role_id)
        await permissions_changed(self._user_repo, self._cache, user_ids)
