"""Resolves a user's effective permission set (implements IPermissionResolver)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from authz.application.interfaces.repositories import IUserRepository
from authz.shared.telemetry.logging import get_logger
from authz.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from authz.application.services.assignment_service import AssignmentService
    from authz.application.services.role_service import RoleService

logger = get_logger(__name__)


class PermissionResolver:
    """Walks assignment ledger -> role catalog -> permission keys.

    The effective set at T is the union, over roles with an in-effect
    assignment at T, of each active role's active permission keys. The
    resolver holds no mutable state: the result depends only on what the
    stores return and the as_of passed in, and every fetch in one call uses
    that same as_of.

    Fail-closed: an unknown or inactive user, a malformed argument, or any
    storage error yields the empty set. Cancellation still propagates.
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        ledger: AssignmentService,
        catalog: RoleService,
    ) -> None:
        self.user_repo = user_repo
        self.ledger = ledger
        self.catalog = catalog

    async def resolve_permissions(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Return permission keys held by user_id at as_of (default: now)."""
        try:
            return await self.resolve_permissions_or_raise(user_id, as_of)
        except Exception:
            logger.warning(
                "Permission resolution failed for user %r; denying", user_id, exc_info=True
            )
            return frozenset()

    async def resolve_permissions_or_raise(
        self, user_id: str, as_of: datetime | None = None
    ) -> frozenset[str]:
        """Like resolve_permissions, but storage failures propagate.

        Unknown users and malformed arguments still resolve to the empty set.
        """
        if as_of is None:
            as_of = utc_now()
        if not isinstance(user_id, str) or not user_id:
            return frozenset()
        if not isinstance(as_of, datetime):
            return frozenset()
        as_of = ensure_utc(as_of)
        if not await self.user_repo.is_active(user_id):
            return frozenset()
        role_ids = await self.ledger.roles_of_user_or_raise(user_id, as_of)
        permissions: set[str] = set()
        for role_id in sorted(role_ids):
            permissions |= await self.catalog.permissions_of_role_or_raise(role_id, as_of)
        return frozenset(permissions)
