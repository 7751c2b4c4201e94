"""Role repository. Read methods return RoleResult (DTO)."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos import RoleResult
from authz.infrastructure.persistence.models.role import Role
from authz.infrastructure.persistence.repositories.base import BaseRepository


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        is_active=r.is_active,
    )


class RoleRepository(BaseRepository[Role]):
    """Role repository (implements IRoleRepository)."""

    conflict_type = "role"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_role(self, role_id: str) -> RoleResult | None:
        orm = await self.get_by_id(role_id)
        return _role_to_result(orm) if orm else None

    async def get_roles(self, role_ids: Collection[str]) -> list[RoleResult]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(list(role_ids))))
        return [_role_to_result(r) for r in result.scalars().all()]

    async def get_active_by_name(self, name: str) -> RoleResult | None:
        result = await self.db.execute(
            select(Role).where(
                func.lower(Role.name) == name.lower(),
                Role.is_active.is_(True),
            )
        )
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def create_role(
        self, name: str, description: str | None = None
    ) -> RoleResult:
        role = Role(name=name, description=description, is_active=True)
        created = await self.create(
            role, conflict_message=f"Role with name '{name}' already exists"
        )
        return _role_to_result(created)

    async def set_active(self, role_id: str, is_active: bool) -> RoleResult | None:
        """Flip is_active. Reactivation can hit the active-name index: ConflictError."""
        role = await self.get_by_id(role_id)
        if role is None:
            return None
        role.is_active = is_active
        updated = await self.update(
            role, conflict_message=f"Role with name '{role.name}' already exists"
        )
        return _role_to_result(updated)

    async def list_roles(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[RoleResult]:
        q = select(Role)
        if not include_inactive:
            q = q.where(Role.is_active.is_(True))
        q = q.order_by(Role.name, Role.id).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_role_to_result(r) for r in result.scalars().all()]
