"""Repository interfaces (ports) for the application layer.

Protocols define the query shapes the authorization core needs from the
persistence collaborator (DIP). The SQLAlchemy repositories in
authz.infrastructure.persistence implement them; any store satisfying
these shapes is acceptable.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from authz.application.dtos import (
    PermissionResult,
    RoleAssignmentResult,
    RolePermissionResult,
    RoleResult,
    UserResult,
)
from authz.domain.entities import ValidityWindow


# Identity store
class IUserRepository(Protocol):
    """Protocol for the identity store."""

    async def get_user(self, user_id: str) -> UserResult | None:
        """Return user by id, or None."""

    async def is_active(self, user_id: str) -> bool:
        """Return True if the user exists and is active."""

    async def get_by_username(self, username: str) -> UserResult | None:
        """Return user by username (case-insensitive), or None."""

    async def create_user(
        self, username: str, display_name: str | None = None
    ) -> UserResult:
        """Create an active user. Raises ConflictError on a duplicate username."""

    async def set_active(self, user_id: str, is_active: bool) -> UserResult | None:
        """Flip the active flag; None if the user does not exist."""

    async def get_permission_revision(self, user_id: str) -> int | None:
        """Return the user's permission revision, or None if the user does not exist."""

    async def bump_permission_revision(self, user_ids: Collection[str]) -> None:
        """Increment the permission revision of each existing user in user_ids."""


# Role catalog
class IRoleRepository(Protocol):
    """Protocol for role storage."""

    async def get_role(self, role_id: str) -> RoleResult | None:
        """Return role by id, or None."""

    async def get_roles(self, role_ids: Collection[str]) -> list[RoleResult]:
        """Return the roles among role_ids that exist (active or not)."""

    async def get_active_by_name(self, name: str) -> RoleResult | None:
        """Return the active role with this name (case-insensitive), or None."""

    async def create_role(
        self, name: str, description: str | None = None
    ) -> RoleResult:
        """Create an active role. Raises ConflictError if an active role has the name."""

    async def set_active(self, role_id: str, is_active: bool) -> RoleResult | None:
        """Flip the active flag; None if the role does not exist."""

    async def list_roles(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[RoleResult]:
        """Return roles ordered by name."""


class IPermissionRepository(Protocol):
    """Protocol for permission storage."""

    async def get_permission(self, permission_id: str) -> PermissionResult | None:
        """Return permission by id, or None."""

    async def get_by_key(self, permission_key: str) -> PermissionResult | None:
        """Return permission by its stable key, or None."""

    async def create_permission(
        self,
        permission_key: str,
        display_name: str,
        component_reference: str | None = None,
    ) -> PermissionResult:
        """Create an active permission. Raises ConflictError on a duplicate key."""

    async def update_permission(
        self,
        permission_id: str,
        display_name: str | None = None,
        component_reference: str | None = None,
    ) -> PermissionResult | None:
        """Update display fields (never the key); None if not found."""

    async def set_active(
        self, permission_id: str, is_active: bool
    ) -> PermissionResult | None:
        """Flip the active flag; None if the permission does not exist."""

    async def list_permissions(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[PermissionResult]:
        """Return permissions ordered by key."""


class IRolePermissionRepository(Protocol):
    """Protocol for role-permission links (no temporal bound)."""

    async def get_permissions_for_role(self, role_id: str) -> list[PermissionResult]:
        """Return every permission linked to the role, active or not."""

    async def get_role_ids_for_permission(self, permission_id: str) -> set[str]:
        """Return ids of roles linking the permission."""

    async def assign_permission_to_role(
        self, role_id: str, permission_id: str, assigned_by: str | None = None
    ) -> RolePermissionResult:
        """Link permission to role. Raises ConflictError if already linked."""

    async def remove_permission_from_role(
        self, role_id: str, permission_id: str
    ) -> bool:
        """Delete the link; False if there was none."""


# Assignment ledger
class IRoleAssignmentRepository(Protocol):
    """Protocol for user-role grants with validity windows."""

    async def get_assignments_for_user(
        self, user_id: str
    ) -> list[RoleAssignmentResult]:
        """Return every assignment row for the user, including ended ones."""

    async def get_user_ids_for_role(self, role_id: str) -> set[str]:
        """Return ids of users with any assignment row for the role."""

    async def create_assignment(
        self,
        user_id: str,
        role_id: str,
        window: ValidityWindow,
        assigned_by: str | None = None,
    ) -> RoleAssignmentResult:
        """Insert a grant unless one for (user, role) overlaps window.

        Check and insert must be atomic. Raises ConflictError on overlap.
        """

    async def get_open_assignments(
        self, user_id: str, role_id: str, as_of: datetime
    ) -> list[RoleAssignmentResult]:
        """Return assignments for the pair that have not ended by as_of."""

    async def end_assignment(
        self,
        assignment_id: str,
        valid_until: datetime,
        revoked_by: str | None = None,
    ) -> RoleAssignmentResult | None:
        """Set valid_until (and revoked_by); None if the row does not exist."""
