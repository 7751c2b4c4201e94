"""Domain value objects."""

from authz.domain.value_objects.core import PermissionKey, RoleName, Username

__all__ = ["PermissionKey", "RoleName", "Username"]
