"""User repository (identity store). Interface methods return application DTOs."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos import UserResult
from authz.infrastructure.persistence.models.user import User
from authz.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        username=u.username,
        display_name=u.display_name,
        is_active=u.is_active,
    )


class UserRepository(BaseRepository[User]):
    """User repository (implements IUserRepository)."""

    conflict_type = "user"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_user(self, user_id: str) -> UserResult | None:
        orm = await self.get_by_id(user_id)
        return _user_to_result(orm) if orm else None

    async def is_active(self, user_id: str) -> bool:
        result = await self.db.execute(select(User.is_active).where(User.id == user_id))
        return bool(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> UserResult | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.username) == username.lower())
        )
        row = result.scalar_one_or_none()
        return _user_to_result(row) if row else None

    async def create_user(
        self, username: str, display_name: str | None = None
    ) -> UserResult:
        user = User(username=username, display_name=display_name, is_active=True)
        created = await self.create(
            user, conflict_message=f"Username '{username}' is already registered"
        )
        return _user_to_result(created)

    async def set_active(self, user_id: str, is_active: bool) -> UserResult | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.is_active = is_active
        return _user_to_result(await self.update(user))

    async def get_permission_revision(self, user_id: str) -> int | None:
        result = await self.db.execute(
            select(User.permission_revision).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def bump_permission_revision(self, user_ids: Collection[str]) -> None:
        """Increment revisions inside the caller's transaction.

        Readers keep seeing the old revision until commit, so anything they
        cache meanwhile lands under a key nobody reads afterwards.
        """
        if not user_ids:
            return
        await self.db.execute(
            update(User)
            .where(User.id.in_(list(user_ids)))
            .values(permission_revision=User.permission_revision + 1)
            .execution_options(synchronize_session=False)
        )
