"""Permission repository. Keys are never updated once created."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos import PermissionResult
from authz.infrastructure.persistence.models.permission import Permission
from authz.infrastructure.persistence.repositories.base import BaseRepository


def _permission_to_result(p: Permission) -> PermissionResult:
    """Map ORM Permission to application PermissionResult."""
    return PermissionResult(
        id=p.id,
        permission_key=p.permission_key,
        display_name=p.display_name,
        component_reference=p.component_reference,
        is_active=p.is_active,
    )


class PermissionRepository(BaseRepository[Permission]):
    """Permission repository (implements IPermissionRepository)."""

    conflict_type = "permission"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Permission)

    async def get_permission(self, permission_id: str) -> PermissionResult | None:
        orm = await self.get_by_id(permission_id)
        return _permission_to_result(orm) if orm else None

    async def get_by_key(self, permission_key: str) -> PermissionResult | None:
        result = await self.db.execute(
            select(Permission).where(Permission.permission_key == permission_key)
        )
        row = result.scalar_one_or_none()
        return _permission_to_result(row) if row else None

    async def create_permission(
        self,
        permission_key: str,
        display_name: str,
        component_reference: str | None = None,
    ) -> PermissionResult:
        perm = Permission(
            permission_key=permission_key,
            display_name=display_name,
            component_reference=component_reference,
            is_active=True,
        )
        created = await self.create(
            perm,
            conflict_message=f"Permission with key '{permission_key}' already exists",
        )
        return _permission_to_result(created)

    async def update_permission(
        self,
        permission_id: str,
        display_name: str | None = None,
        component_reference: str | None = None,
    ) -> PermissionResult | None:
        perm = await self.get_by_id(permission_id)
        if perm is None:
            return None
        if display_name is not None:
            perm.display_name = display_name
        if component_reference is not None:
            perm.component_reference = component_reference
        return _permission_to_result(await self.update(perm))

    async def set_active(
        self, permission_id: str, is_active: bool
    ) -> PermissionResult | None:
        perm = await self.get_by_id(permission_id)
        if perm is None:
            return None
        perm.is_active = is_active
        return _permission_to_result(await self.update(perm))

    async def list_permissions(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[PermissionResult]:
        q = select(Permission)
        if not include_inactive:
            q = q.where(Permission.is_active.is_(True))
        q = q.order_by(Permission.permission_key).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_permission_to_result(p) for p in result.scalars().all()]
