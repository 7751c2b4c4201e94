"""Assignment ledger: which roles a user holds, and when.

Grants carry a half-open validity window [valid_from, valid_until). Revoking
ends the window instead of deleting the row, so the history stays available
for audit.
"""

from __future__ import annotations

from datetime import datetime

from authz.application.dtos import RoleAssignmentResult
from authz.application.interfaces.repositories import (
    IRoleAssignmentRepository,
    IRoleRepository,
    IUserRepository,
)
from authz.application.interfaces.services import ICacheService
from authz.application.services.admin_guard import AdminGuard
from authz.application.services.permission_cache import permissions_changed
from authz.domain.entities import ValidityWindow
from authz.domain.exceptions import (
    InactiveEntityError,
    NotFoundError,
    ValidationException,
)
from authz.shared.telemetry.logging import get_logger
from authz.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


def _in_effect(assignment: RoleAssignmentResult, as_of: datetime) -> bool:
    """Window half of the in-effect rule. A malformed stored window never grants."""
    try:
        return assignment.to_entity().is_in_effect(as_of)
    except ValidationException:
        logger.warning(
            "Ignoring assignment %s with malformed validity window", assignment.id
        )
        return False


class AssignmentService:
    """Grant, revoke and query user-role assignments."""

    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        assignment_repo: IRoleAssignmentRepository,
        *,
        cache: ICacheService | None = None,
        guard: AdminGuard | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._role_repo = role_repo
        self._assignment_repo = assignment_repo
        self._cache = cache
        self._guard = guard

    async def roles_of_user(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Return ids of active roles with an in-effect assignment at as_of.

        Empty (never an error) when the user is unknown, inactive, or has no
        assignments. Storage failures are logged and yield the empty set.
        """
        try:
            return await self.roles_of_user_or_raise(user_id, as_of)
        except Exception:
            logger.warning("roles_of_user failed for %r; denying", user_id, exc_info=True)
            return frozenset()

    async def roles_of_user_or_raise(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Like roles_of_user, but storage failures propagate."""
        moment = utc_now() if as_of is None else ensure_utc(as_of)
        if not await self._user_repo.is_active(user_id):
            return frozenset()
        assignments = await self._assignment_repo.get_assignments_for_user(user_id)
        candidate_ids = {a.role_id for a in assignments if _in_effect(a, moment)}
        if not candidate_ids:
            return frozenset()
        roles = await self._role_repo.get_roles(candidate_ids)
        return frozenset(r.id for r in roles if r.is_active)

    async def list_assignments(self, user_id: str) -> list[RoleAssignmentResult]:
        """Return the user's full assignment history, oldest first."""
        assignments = await self._assignment_repo.get_assignments_for_user(user_id)
        return sorted(assignments, key=lambda a: (a.valid_from, a.assigned_at))

    async def grant(
        self,
        user_id: str,
        role_id: str,
        granted_by: str | None,
        valid_from: datetime | None = None,
        valid_until: datetime | None = None,
    ) -> str:
        """Grant role_id to user_id; return the new assignment id.

        valid_from defaults to now; valid_until None is unbounded.

        Raises:
            AuthorizationException: A guard is wired and granted_by is not an admin.
            NotFoundError: User or role does not exist.
            InactiveEntityError: User or role is deactivated.
            ValidationException: valid_from is later than valid_until.
            ConflictError: An assignment for the pair overlaps the window.
        """
        if self._guard is not None:
            await self._guard.check(granted_by)
        user = await self._user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        if not user.is_active:
            raise InactiveEntityError("user", user_id)
        role = await self._role_repo.get_role(role_id)
        if role is None:
            raise NotFoundError("role", role_id)
        if not role.is_active:
            raise InactiveEntityError("role", role_id)

        window = ValidityWindow(
            valid_from if valid_from is not None else utc_now(), valid_until
        )
        assignment = await self._assignment_repo.create_assignment(
            user_id, role_id, window, assigned_by=granted_by
        )
        await permissions_changed(self._user_repo, self._cache, [user_id])
        logger.info(
            "Granted role %s to user %s (assignment=%s, by=%s, window=[%s, %s))",
            role_id,
            user_id,
            assignment.id,
            granted_by,
            window.valid_from.isoformat(),
            window.valid_until.isoformat() if window.valid_until else "unbounded",
        )
        return assignment.id

    async def revoke(
        self,
        user_id: str,
        role_id: str,
        revoked_at: datetime | None = None,
        revoked_by: str | None = None,
    ) -> None:
        """End every open assignment (current or scheduled) of role_id to user_id.

        Each window is closed at max(revoked_at, valid_from), so a scheduled
        grant becomes an empty window rather than an inverted one.

        Raises:
            AuthorizationException: A guard is wired and revoked_by is not an admin.
            NotFoundError: No open assignment exists (including a repeated revoke).
        """
        if self._guard is not None:
            await self._guard.check(revoked_by)
        moment = utc_now() if revoked_at is None else ensure_utc(revoked_at)
        open_assignments = await self._assignment_repo.get_open_assignments(
            user_id, role_id, moment
        )
        if not open_assignments:
            raise NotFoundError(
                "role_assignment",
                f"{user_id}/{role_id}",
                message=f"No active assignment of role {role_id} to user {user_id}",
            )
        for assignment in open_assignments:
            closed = assignment.window.closed_at(moment)
            await self._assignment_repo.end_assignment(
                assignment.id, closed.valid_until, revoked_by=revoked_by
            )
        await permissions_changed(self._user_repo, self._cache, [user_id])
        logger.info(
            "Revoked role %s from user %s (%s assignment(s), by=%s, at=%s)",
            role_id,
            user_id,
            len(open_assignments),
            revoked_by,
            moment.isoformat(),
        )
