"""DTOs for permission use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PermissionResult:
    """Permission read-model. permission_key is the stable identifier used in code."""

    id: str
    permission_key: str
    display_name: str
    component_reference: str | None
    is_active: bool


@dataclass(frozen=True)
class RolePermissionResult:
    """Role-permission link read-model."""

    id: str
    role_id: str
    permission_id: str
    assigned_at: datetime
    assigned_by: str | None
