"""Ports consumed by application services."""

from authz.application.interfaces.repositories import (
    IPermissionRepository,
    IRoleAssignmentRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from authz.application.interfaces.services import ICacheService, IPermissionResolver

__all__ = [
    "ICacheService",
    "IPermissionRepository",
    "IPermissionResolver",
    "IRoleAssignmentRepository",
    "IRolePermissionRepository",
    "IRoleRepository",
    "IUserRepository",
]
