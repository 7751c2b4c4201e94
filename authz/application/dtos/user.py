"""DTOs for identity use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model. No credentials: authentication happens elsewhere."""

    id: str
    username: str
    display_name: str | None
    is_active: bool
