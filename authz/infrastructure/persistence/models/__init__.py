"""ORM models. Import from here so every table is registered on Base.metadata."""

from authz.infrastructure.persistence.models.assignment import RoleAssignment
from authz.infrastructure.persistence.models.permission import Permission, RolePermission
from authz.infrastructure.persistence.models.role import Role
from authz.infrastructure.persistence.models.user import User

__all__ = ["Permission", "Role", "RoleAssignment", "RolePermission", "User"]
