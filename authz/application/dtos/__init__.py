"""Application DTOs (frozen dataclass read-models)."""

from authz.application.dtos.assignment import RoleAssignmentResult
from authz.application.dtos.permission import PermissionResult, RolePermissionResult
from authz.application.dtos.role import RoleResult
from authz.application.dtos.user import UserResult

__all__ = [
    "PermissionResult",
    "RoleAssignmentResult",
    "RolePermissionResult",
    "RoleResult",
    "UserResult",
]
