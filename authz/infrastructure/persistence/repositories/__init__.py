"""SQLAlchemy repositories implementing the application repository protocols.

All repositories in one unit of work share a single AsyncSession; the
caller owns the transaction (see database.transactional_session).
"""

from authz.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)
from authz.infrastructure.persistence.repositories.role_assignment_repo import (
    RoleAssignmentRepository,
)
from authz.infrastructure.persistence.repositories.role_permission_repo import (
    RolePermissionRepository,
)
from authz.infrastructure.persistence.repositories.role_repo import RoleRepository
from authz.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "PermissionRepository",
    "RoleAssignmentRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "UserRepository",
]
