"""Domain exceptions for the authorization core.

Mutating operations (grant, revoke, catalog management) raise these so
administrative callers get explicit feedback. Read-only authorization
checks never raise them; every failure there collapses to "denied".
"""

from typing import Any


class AuthzException(Exception):
    """Base exception for all authorization-core errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. resource_type, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(AuthzException):
    """Raised when input validation fails (malformed key, inverted window)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthorizationException(AuthzException):
    """Raised by require_permission when access is denied.

    The message is deliberately generic: it never says whether the user was
    unknown, the role inactive, or the permission undefined.
    """

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class NotFoundError(AuthzException):
    """Raised when a referenced user, role, permission or assignment does not exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        *,
        message: str | None = None,
        error_code: str = "RESOURCE_NOT_FOUND",
    ) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'role').
            resource_id: The id or key that was not found.
            message: Optional override for the default message.
            error_code: Optional override (used by subclasses).
        """
        super().__init__(
            message or f"{resource_type} not found: {resource_id}",
            error_code,
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InactiveEntityError(NotFoundError):
    """Raised when an operation targets a deactivated user, role or permission.

    Subclasses NotFoundError: an inactive entity is not a valid grant target,
    so callers catching NotFoundError also see this case.
    """

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            resource_type,
            resource_id,
            message=f"{resource_type} is inactive: {resource_id}",
            error_code="INACTIVE_ENTITY",
        )


class ConflictError(AuthzException):
    """Raised when a write would break a uniqueness invariant.

    Covers overlapping role grants, duplicate role-permission links, and
    duplicate role names, permission keys or usernames.
    """

    def __init__(
        self,
        message: str,
        conflict_type: str,
        details_extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and conflict context.

        Args:
            message: Human-readable description (e.g. 'Role already granted').
            conflict_type: 'role_assignment', 'role_permission', 'role',
                'permission' or 'user'.
            details_extra: Optional extra keys (e.g. user_id, role_id).
        """
        details = dict(details_extra or {})
        details["conflict_type"] = conflict_type
        super().__init__(message, "CONFLICT", details)


class SqlNotConfiguredException(AuthzException):
    """Raised when a SQL session is requested but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
