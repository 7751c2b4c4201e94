"""Domain value objects for the authorization core.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

from authz.core.constants import (
    PERMISSION_KEY_MAX_LENGTH,
    PERMISSION_KEY_PATTERN,
    ROLE_NAME_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
)
from authz.domain.exceptions import ValidationException

_PERMISSION_KEY_RE = re.compile(PERMISSION_KEY_PATTERN)


def _require_text(value: object, field: str, max_len: int) -> str:
    """Return value stripped; raise ValidationException if empty, non-str or too long."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{field} must be a non-empty string", field=field)
    stripped = value.strip()
    if len(stripped) > max_len:
        raise ValidationException(
            f"{field} must not exceed {max_len} characters", field=field
        )
    return stripped


@dataclass(frozen=True)
class PermissionKey:
    """Stable machine-readable identifier for one grantable capability.

    Keys are upper snake case (e.g. 'USER_MGMT'), at most 100 characters.
    Code depends on a key never changing meaning, so keys are never renamed.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise ValidationException(
                "Permission key must be a non-empty string", field="permission_key"
            )
        if len(self.value) > PERMISSION_KEY_MAX_LENGTH:
            raise ValidationException(
                f"Permission key must not exceed {PERMISSION_KEY_MAX_LENGTH} characters",
                field="permission_key",
            )
        if not _PERMISSION_KEY_RE.match(self.value):
            raise ValidationException(
                "Permission key must be upper snake case (e.g. 'USER_MGMT')",
                field="permission_key",
            )

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Return True if value would construct a PermissionKey."""
        return (
            isinstance(value, str)
            and 0 < len(value) <= PERMISSION_KEY_MAX_LENGTH
            and _PERMISSION_KEY_RE.match(value) is not None
        )


@dataclass(frozen=True)
class RoleName:
    """Role display name; uniqueness is case-insensitive among active roles."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "value", _require_text(self.value, "role_name", ROLE_NAME_MAX_LENGTH)
        )


@dataclass(frozen=True)
class Username:
    """Login name of a principal; uniqueness is case-insensitive."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "value", _require_text(self.value, "username", USERNAME_MAX_LENGTH)
        )
