"""RoleAssignment repository: the assignment ledger's storage.

Overlap check and insert run under a row lock on the user, so two
concurrent grants of the same (user, role) serialize here. The exclusion
constraint from the migration backs this up: if anything slips past the
lock, the insert fails and surfaces as ConflictError.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos import RoleAssignmentResult
from authz.domain.entities import ValidityWindow
from authz.domain.exceptions import ConflictError
from authz.infrastructure.persistence.models.assignment import RoleAssignment
from authz.infrastructure.persistence.models.user import User
from authz.shared.utils.datetime import ensure_utc


def _assignment_to_result(ra: RoleAssignment) -> RoleAssignmentResult:
    """Map ORM RoleAssignment to application RoleAssignmentResult."""
    return RoleAssignmentResult(
        id=ra.id,
        user_id=ra.user_id,
        role_id=ra.role_id,
        assigned_at=ensure_utc(ra.assigned_at),
        assigned_by=ra.assigned_by,
        valid_from=ensure_utc(ra.valid_from),
        valid_until=ensure_utc(ra.valid_until),
        revoked_by=ra.revoked_by,
    )


def _overlap_error(user_id: str, role_id: str) -> ConflictError:
    return ConflictError(
        "Role already granted to user for an overlapping period",
        conflict_type="role_assignment",
        details_extra={"user_id": user_id, "role_id": role_id},
    )


class RoleAssignmentRepository:
    """User-role grants with validity windows (implements IRoleAssignmentRepository)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_assignments_for_user(
        self, user_id: str
    ) -> list[RoleAssignmentResult]:
        result = await self.db.execute(
            select(RoleAssignment)
            .where(RoleAssignment.user_id == user_id)
            .order_by(RoleAssignment.valid_from, RoleAssignment.assigned_at)
        )
        return [_assignment_to_result(ra) for ra in result.scalars().all()]

    async def get_user_ids_for_role(self, role_id: str) -> set[str]:
        result = await self.db.execute(
            select(RoleAssignment.user_id)
            .where(RoleAssignment.role_id == role_id)
            .distinct()
        )
        return set(result.scalars().all())

    async def create_assignment(
        self,
        user_id: str,
        role_id: str,
        window: ValidityWindow,
        assigned_by: str | None = None,
    ) -> RoleAssignmentResult:
        # Serialize grants per user for the rest of the transaction.
        await self.db.execute(
            select(User.id).where(User.id == user_id).with_for_update()
        )
        candidates = await self.db.execute(
            select(RoleAssignment).where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.role_id == role_id,
                or_(
                    RoleAssignment.valid_until.is_(None),
                    RoleAssignment.valid_until > window.valid_from,
                ),
            )
        )
        for existing in candidates.scalars().all():
            existing_window = ValidityWindow(
                ensure_utc(existing.valid_from), ensure_utc(existing.valid_until)
            )
            if existing_window.overlaps(window):
                raise _overlap_error(user_id, role_id)

        ra = RoleAssignment(
            user_id=user_id,
            role_id=role_id,
            assigned_by=assigned_by,
            valid_from=window.valid_from,
            valid_until=window.valid_until,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(ra)
                await self.db.flush()
        except IntegrityError:
            raise _overlap_error(user_id, role_id) from None
        await self.db.refresh(ra)
        return _assignment_to_result(ra)

    async def get_open_assignments(
        self, user_id: str, role_id: str, as_of: datetime
    ) -> list[RoleAssignmentResult]:
        result = await self.db.execute(
            select(RoleAssignment)
            .where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.role_id == role_id,
                or_(
                    RoleAssignment.valid_until.is_(None),
                    # Empty windows are revoked scheduled grants, not open ones.
                    and_(
                        RoleAssignment.valid_until > as_of,
                        RoleAssignment.valid_until > RoleAssignment.valid_from,
                    ),
                ),
            )
            .order_by(RoleAssignment.valid_from)
            .with_for_update()
        )
        return [_assignment_to_result(ra) for ra in result.scalars().all()]

    async def end_assignment(
        self,
        assignment_id: str,
        valid_until: datetime,
        revoked_by: str | None = None,
    ) -> RoleAssignmentResult | None:
        result = await self.db.execute(
            select(RoleAssignment).where(RoleAssignment.id == assignment_id)
        )
        ra = result.scalar_one_or_none()
        if ra is None:
            return None
        ra.valid_until = valid_until
        ra.revoked_by = revoked_by
        await self.db.flush()
        await self.db.refresh(ra)
        return _assignment_to_result(ra)
