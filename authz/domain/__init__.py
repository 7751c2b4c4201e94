"""Domain layer: entities, value objects and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from authz.domain.entities import RoleAssignmentEntity, ValidityWindow
from authz.domain.exceptions import (
    AuthorizationException,
    AuthzException,
    ConflictError,
    InactiveEntityError,
    NotFoundError,
    SqlNotConfiguredException,
    ValidationException,
)
from authz.domain.value_objects import PermissionKey, RoleName, Username

__all__ = [
    # Entities
    "RoleAssignmentEntity",
    "ValidityWindow",
    # Exceptions
    "AuthorizationException",
    "AuthzException",
    "ConflictError",
    "InactiveEntityError",
    "NotFoundError",
    "SqlNotConfiguredException",
    "ValidationException",
    # Value objects
    "PermissionKey",
    "RoleName",
    "Username",
]
