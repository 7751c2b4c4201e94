"""Base repository: generic get/create/update over one ORM model."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authz.domain.exceptions import ConflictError
from authz.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get_by_id, create and update.

    Writes run inside a SAVEPOINT so a unique-constraint violation maps to
    ConflictError without poisoning the caller's outer transaction.
    """

    conflict_type: str = "entity"

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType, *, conflict_message: str) -> ModelType:
        """Persist a new record; raise ConflictError on a uniqueness violation."""
        try:
            async with self.db.begin_nested():
                self.db.add(obj)
                await self.db.flush()
        except IntegrityError:
            raise ConflictError(conflict_message, conflict_type=self.conflict_type) from None
        await self.db.refresh(obj)
        return obj

    async def update(
        self, obj: ModelType, *, conflict_message: str | None = None
    ) -> ModelType:
        """Flush pending changes on an attached record and reload it."""
        try:
            async with self.db.begin_nested():
                await self.db.flush()
        except IntegrityError:
            raise ConflictError(
                conflict_message or f"{self.conflict_type} violates a uniqueness constraint",
                conflict_type=self.conflict_type,
            ) from None
        await self.db.refresh(obj)
        return obj
