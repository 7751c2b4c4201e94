"""In-memory repositories implementing the application repository protocols.

One InMemoryStore holds every table; the fake repositories are thin views
over it, so services wired with them see each other's writes the way SQL
repositories sharing one session would. Set store.fail = True to make every
repository call raise, which is how the fail-closed tests simulate an
unreachable database.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Collection
from dataclasses import dataclass, field, replace
from datetime import datetime

from authz.application.dtos import (
    PermissionResult,
    RoleAssignmentResult,
    RolePermissionResult,
    RoleResult,
    UserResult,
)
from authz.domain.entities import ValidityWindow
from authz.domain.exceptions import ConflictError
from authz.shared.utils.datetime import utc_now


class StorageUnavailable(ConnectionError):
    """Raised by fake repositories while store.fail is set."""


@dataclass
class InMemoryStore:
    users: dict[str, UserResult] = field(default_factory=dict)
    roles: dict[str, RoleResult] = field(default_factory=dict)
    permissions: dict[str, PermissionResult] = field(default_factory=dict)
    links: dict[str, RolePermissionResult] = field(default_factory=dict)
    assignments: dict[str, RoleAssignmentResult] = field(default_factory=dict)
    revisions: dict[str, int] = field(default_factory=dict)
    fail: bool = False
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def check(self) -> None:
        if self.fail:
            raise StorageUnavailable("storage unavailable")


class FakeUserRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_user(self, user_id: str) -> UserResult | None:
        self.store.check()
        return self.store.users.get(user_id)

    async def is_active(self, user_id: str) -> bool:
        self.store.check()
        user = self.store.users.get(user_id)
        return user is not None and user.is_active

    async def get_by_username(self, username: str) -> UserResult | None:
        self.store.check()
        wanted = username.lower()
        for user in self.store.users.values():
            if user.username.lower() == wanted:
                return user
        return None

    async def create_user(
        self, username: str, display_name: str | None = None
    ) -> UserResult:
        self.store.check()
        if any(u.username.lower() == username.lower() for u in self.store.users.values()):
            raise ConflictError(
                f"Username '{username}' is already registered", conflict_type="user"
            )
        user = UserResult(
            id=self.store.next_id("user"),
            username=username,
            display_name=display_name,
            is_active=True,
        )
        self.store.users[user.id] = user
        return user

    async def set_active(self, user_id: str, is_active: bool) -> UserResult | None:
        self.store.check()
        user = self.store.users.get(user_id)
        if user is None:
            return None
        user = replace(user, is_active=is_active)
        self.store.users[user_id] = user
        return user

    async def get_permission_revision(self, user_id: str) -> int | None:
        self.store.check()
        if user_id not in self.store.users:
            return None
        return self.store.revisions.get(user_id, 0)

    async def bump_permission_revision(self, user_ids: Collection[str]) -> None:
        self.store.check()
        for user_id in user_ids:
            if user_id in self.store.users:
                self.store.revisions[user_id] = self.store.revisions.get(user_id, 0) + 1


class FakeRoleRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def _active_clash(self, name: str, exclude_id: str | None = None) -> bool:
        return any(
            r.is_active and r.name.lower() == name.lower() and r.id != exclude_id
            for r in self.store.roles.values()
        )

    async def get_role(self, role_id: str) -> RoleResult | None:
        self.store.check()
        return self.store.roles.get(role_id)

    async def get_roles(self, role_ids: Collection[str]) -> list[RoleResult]:
        self.store.check()
        return [self.store.roles[r] for r in role_ids if r in self.store.roles]

    async def get_active_by_name(self, name: str) -> RoleResult | None:
        self.store.check()
        for role in self.store.roles.values():
            if role.is_active and role.name.lower() == name.lower():
                return role
        return None

    async def create_role(
        self, name: str, description: str | None = None
    ) -> RoleResult:
        self.store.check()
        if self._active_clash(name):
            raise ConflictError(
                f"Role with name '{name}' already exists", conflict_type="role"
            )
        role = RoleResult(
            id=self.store.next_id("role"),
            name=name,
            description=description,
            is_active=True,
        )
        self.store.roles[role.id] = role
        return role

    async def set_active(self, role_id: str, is_active: bool) -> RoleResult | None:
        self.store.check()
        role = self.store.roles.get(role_id)
        if role is None:
            return None
        if is_active and self._active_clash(role.name, exclude_id=role_id):
            raise ConflictError(
                f"Role with name '{role.name}' already exists", conflict_type="role"
            )
        role = replace(role, is_active=is_active)
        self.store.roles[role_id] = role
        return role

    async def list_roles(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[RoleResult]:
        self.store.check()
        roles = [
            r for r in self.store.roles.values() if include_inactive or r.is_active
        ]
        roles.sort(key=lambda r: (r.name, r.id))
        return roles[skip : skip + limit]


class FakePermissionRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_permission(self, permission_id: str) -> PermissionResult | None:
        self.store.check()
        return self.store.permissions.get(permission_id)

    async def get_by_key(self, permission_key: str) -> PermissionResult | None:
        self.store.check()
        for perm in self.store.permissions.values():
            if perm.permission_key == permission_key:
                return perm
        return None

    async def create_permission(
        self,
        permission_key: str,
        display_name: str,
        component_reference: str | None = None,
    ) -> PermissionResult:
        self.store.check()
        if await self.get_by_key(permission_key):
            raise ConflictError(
                f"Permission with key '{permission_key}' already exists",
                conflict_type="permission",
            )
        perm = PermissionResult(
            id=self.store.next_id("perm"),
            permission_key=permission_key,
            display_name=display_name,
            component_reference=component_reference,
            is_active=True,
        )
        self.store.permissions[perm.id] = perm
        return perm

    async def update_permission(
        self,
        permission_id: str,
        display_name: str | None = None,
        component_reference: str | None = None,
    ) -> PermissionResult | None:
        self.store.check()
        perm = self.store.permissions.get(permission_id)
        if perm is None:
            return None
        if display_name is not None:
            perm = replace(perm, display_name=display_name)
        if component_reference is not None:
            perm = replace(perm, component_reference=component_reference)
        self.store.permissions[permission_id] = perm
        return perm

    async def set_active(
        self, permission_id: str, is_active: bool
    ) -> PermissionResult | None:
        self.store.check()
        perm = self.store.permissions.get(permission_id)
        if perm is None:
            return None
        perm = replace(perm, is_active=is_active)
        self.store.permissions[permission_id] = perm
        return perm

    async def list_permissions(
        self, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> list[PermissionResult]:
        self.store.check()
        perms = [
            p
            for p in self.store.permissions.values()
            if include_inactive or p.is_active
        ]
        perms.sort(key=lambda p: p.permission_key)
        return perms[skip : skip + limit]


class FakeRolePermissionRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_permissions_for_role(self, role_id: str) -> list[PermissionResult]:
        self.store.check()
        return [
            self.store.permissions[link.permission_id]
            for link in self.store.links.values()
            if link.role_id == role_id
        ]

    async def get_role_ids_for_permission(self, permission_id: str) -> set[str]:
        self.store.check()
        return {
            link.role_id
            for link in self.store.links.values()
            if link.permission_id == permission_id
        }

    async def assign_permission_to_role(
        self, role_id: str, permission_id: str, assigned_by: str | None = None
    ) -> RolePermissionResult:
        self.store.check()
        for link in self.store.links.values():
            if link.role_id == role_id and link.permission_id == permission_id:
                raise ConflictError(
                    "Permission already assigned to role",
                    conflict_type="role_permission",
                )
        link = RolePermissionResult(
            id=self.store.next_id("rp"),
            role_id=role_id,
            permission_id=permission_id,
            assigned_at=utc_now(),
            assigned_by=assigned_by,
        )
        self.store.links[link.id] = link
        return link

    async def remove_permission_from_role(
        self, role_id: str, permission_id: str
    ) -> bool:
        self.store.check()
        for link_id, link in list(self.store.links.items()):
            if link.role_id == role_id and link.permission_id == permission_id:
                del self.store.links[link_id]
                return True
        return False


class FakeRoleAssignmentRepository:
    """Assignment storage; the lock plays the part of the user row lock."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._lock = asyncio.Lock()

    def _for_pair(self, user_id: str, role_id: str) -> list[RoleAssignmentResult]:
        return [
            a
            for a in self.store.assignments.values()
            if a.user_id == user_id and a.role_id == role_id
        ]

    async def get_assignments_for_user(
        self, user_id: str
    ) -> list[RoleAssignmentResult]:
        self.store.check()
        return [a for a in self.store.assignments.values() if a.user_id == user_id]

    async def get_user_ids_for_role(self, role_id: str) -> set[str]:
        self.store.check()
        return {a.user_id for a in self.store.assignments.values() if a.role_id == role_id}

    async def create_assignment(
        self,
        user_id: str,
        role_id: str,
        window: ValidityWindow,
        assigned_by: str | None = None,
    ) -> RoleAssignmentResult:
        self.store.check()
        async with self._lock:
            for existing in self._for_pair(user_id, role_id):
                if existing.window.overlaps(window):
                    raise ConflictError(
                        "Role already granted to user for an overlapping period",
                        conflict_type="role_assignment",
                        details_extra={"user_id": user_id, "role_id": role_id},
                    )
            # Yield while holding the lock so a racing grant queues behind it.
            await asyncio.sleep(0)
            assignment = RoleAssignmentResult(
                id=self.store.next_id("ra"),
                user_id=user_id,
                role_id=role_id,
                assigned_at=utc_now(),
                assigned_by=assigned_by,
                valid_from=window.valid_from,
                valid_until=window.valid_until,
            )
            self.store.assignments[assignment.id] = assignment
            return assignment

    async def get_open_assignments(
        self, user_id: str, role_id: str, as_of: datetime
    ) -> list[RoleAssignmentResult]:
        self.store.check()
        return sorted(
            (a for a in self._for_pair(user_id, role_id) if a.window.is_open_at(as_of)),
            key=lambda a: a.valid_from,
        )

    async def end_assignment(
        self,
        assignment_id: str,
        valid_until: datetime,
        revoked_by: str | None = None,
    ) -> RoleAssignmentResult | None:
        self.store.check()
        assignment = self.store.assignments.get(assignment_id)
        if assignment is None:
            return None
        assignment = replace(assignment, valid_until=valid_until, revoked_by=revoked_by)
        self.store.assignments[assignment_id] = assignment
        return assignment
