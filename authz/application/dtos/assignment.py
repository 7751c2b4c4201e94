"""DTOs for assignment ledger use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from authz.domain.entities import RoleAssignmentEntity, ValidityWindow


@dataclass(frozen=True)
class RoleAssignmentResult:
    """User-role grant read-model, including history rows that have ended."""

    id: str
    user_id: str
    role_id: str
    assigned_at: datetime
    assigned_by: str | None
    valid_from: datetime
    valid_until: datetime | None
    revoked_by: str | None = None

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(self.valid_from, self.valid_until)

    def to_entity(self) -> RoleAssignmentEntity:
        """Build the domain entity carrying the in-effect rule."""
        return RoleAssignmentEntity(
            id=self.id,
            user_id=self.user_id,
            role_id=self.role_id,
            window=self.window,
            assigned_at=self.assigned_at,
            assigned_by=self.assigned_by,
            revoked_by=self.revoked_by,
        )
