"""RolePermission repository: role-permission links (single entity responsibility)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos import PermissionResult, RolePermissionResult
from authz.domain.exceptions import ConflictError
from authz.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from authz.infrastructure.persistence.repositories.permission_repo import (
    _permission_to_result,
)
from authz.shared.utils.datetime import ensure_utc


def _link_to_result(rp: RolePermission) -> RolePermissionResult:
    return RolePermissionResult(
        id=rp.id,
        role_id=rp.role_id,
        permission_id=rp.permission_id,
        assigned_at=ensure_utc(rp.assigned_at),
        assigned_by=rp.assigned_by,
    )


class RolePermissionRepository:
    """Role-permission link table only. Link/unlink and query permissions for a role."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_permissions_for_role(self, role_id: str) -> list[PermissionResult]:
        result = await self.db.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.permission_key)
        )
        return [_permission_to_result(p) for p in result.scalars().all()]

    async def get_role_ids_for_permission(self, permission_id: str) -> set[str]:
        result = await self.db.execute(
            select(RolePermission.role_id).where(
                RolePermission.permission_id == permission_id
            )
        )
        return set(result.scalars().all())

    async def assign_permission_to_role(
        self, role_id: str, permission_id: str, assigned_by: str | None = None
    ) -> RolePermissionResult:
        rp = RolePermission(
            role_id=role_id,
            permission_id=permission_id,
            assigned_by=assigned_by,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(rp)
                await self.db.flush()
        except IntegrityError:
            raise ConflictError(
                "Permission already assigned to role",
                conflict_type="role_permission",
                details_extra={"role_id": role_id, "permission_id": permission_id},
            ) from None
        await self.db.refresh(rp)
        return _link_to_result(rp)

    async def remove_permission_from_role(
        self, role_id: str, permission_id: str
    ) -> bool:
        result = await self.db.execute(
            select(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        rp = result.scalar_one_or_none()
        if not rp:
            return False
        await self.db.delete(rp)
        await self.db.flush()
        return True
