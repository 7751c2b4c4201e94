"""DTOs for role catalog use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_role, create_role, list_roles, etc.)."""

    id: str
    name: str
    description: str | None
    is_active: bool
