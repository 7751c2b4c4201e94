"""Role assignment domain entity and its validity window.

A grant is in effect at T iff valid_from <= T < valid_until (valid_until
None means unbounded) and both the user and the role are active. The
window half is pure and lives here; the active-flag half needs the
identity store and catalog and is applied by the ledger.
"""

from dataclasses import dataclass
from datetime import datetime

from authz.domain.exceptions import ValidationException
from authz.shared.utils.datetime import ensure_utc


@dataclass(frozen=True)
class ValidityWindow:
    """Half-open interval [valid_from, valid_until). valid_until None is unbounded."""

    valid_from: datetime
    valid_until: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.valid_from, datetime):
            raise ValidationException("valid_from must be a datetime", field="valid_from")
        if self.valid_until is not None and not isinstance(self.valid_until, datetime):
            raise ValidationException(
                "valid_until must be a datetime", field="valid_until"
            )
        object.__setattr__(self, "valid_from", ensure_utc(self.valid_from))
        object.__setattr__(self, "valid_until", ensure_utc(self.valid_until))
        if self.valid_until is not None and self.valid_from > self.valid_until:
            raise ValidationException(
                "valid_from must not be later than valid_until", field="valid_until"
            )

    def contains(self, as_of: datetime) -> bool:
        """Return True if as_of falls inside the window (inclusive lower, exclusive upper)."""
        moment = ensure_utc(as_of)
        if moment is None or moment < self.valid_from:
            return False
        return self.valid_until is None or moment < self.valid_until

    def overlaps(self, other: "ValidityWindow") -> bool:
        """Return True if the two windows share at least one instant.

        An empty window (valid_from == valid_until) overlaps nothing.
        """
        if self.is_empty or other.is_empty:
            return False
        starts_before_other_ends = (
            other.valid_until is None or self.valid_from < other.valid_until
        )
        other_starts_before_self_ends = (
            self.valid_until is None or other.valid_from < self.valid_until
        )
        return starts_before_other_ends and other_starts_before_self_ends

    def is_open_at(self, as_of: datetime) -> bool:
        """Return True if the window has not ended by as_of (current or scheduled).

        An empty window is closed: it is what revoking a scheduled grant leaves.
        """
        if self.is_empty:
            return False
        moment = ensure_utc(as_of)
        return self.valid_until is None or (moment is not None and moment < self.valid_until)

    @property
    def is_empty(self) -> bool:
        return self.valid_until is not None and self.valid_until == self.valid_from

    def closed_at(self, moment: datetime) -> "ValidityWindow":
        """Return this window ended at moment (never before it starts)."""
        end = max(ensure_utc(moment), self.valid_from)
        if self.valid_until is not None:
            end = min(end, self.valid_until)
        return ValidityWindow(self.valid_from, end)


@dataclass(frozen=True)
class RoleAssignmentEntity:
    """A grant of one role to one user, bounded by a validity window."""

    id: str
    user_id: str
    role_id: str
    window: ValidityWindow
    assigned_at: datetime
    assigned_by: str | None = None
    revoked_by: str | None = None

    def is_in_effect(self, as_of: datetime) -> bool:
        """Window half of the in-effect rule; active flags are checked by the ledger."""
        return self.window.contains(as_of)
