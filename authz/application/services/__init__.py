"""Application services: resolver, authorization checks, ledger, catalog, identity."""

from authz.application.services.admin_guard import AdminGuard
from authz.application.services.assignment_service import AssignmentService
from authz.application.services.authorization_service import AuthorizationService
from authz.application.services.permission_resolver import PermissionResolver
from authz.application.services.permission_service import PermissionService
from authz.application.services.role_service import RoleService
from authz.application.services.user_service import UserService

__all__ = [
    "AdminGuard",
    "AssignmentService",
    "AuthorizationService",
    "PermissionResolver",
    "PermissionService",
    "RoleService",
    "UserService",
]
