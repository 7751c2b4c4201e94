"""In-memory fakes of the repository protocols, for tests without Postgres."""

from tests.fakes.stores import (
    FakePermissionRepository,
    FakeRoleAssignmentRepository,
    FakeRolePermissionRepository,
    FakeRoleRepository,
    FakeUserRepository,
    InMemoryStore,
    StorageUnavailable,
)
from tests.fakes.wiring import Services, build_services, seed_role

__all__ = [
    "FakePermissionRepository",
    "FakeRoleAssignmentRepository",
    "FakeRolePermissionRepository",
    "FakeRoleRepository",
    "FakeUserRepository",
    "InMemoryStore",
    "Services",
    "StorageUnavailable",
    "build_services",
    "seed_role",
]
