"""RoleAssignment ORM model (assignment ledger).

Rows are never deleted: revoking sets valid_until. The migration adds a
GiST exclusion constraint so two windows for the same (user, role) can
never overlap, which is what makes concurrent grants safe at the database.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import CuidMixin


class RoleAssignment(CuidMixin, Base):
    """User-role grant with validity window [valid_from, valid_until). Table: role_assignment."""

    __tablename__ = "role_assignment"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False
    )
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="RESTRICT"), nullable=False
    )
    # Actor ids are free-form ("sys" for bootstrap), so no FK.
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    valid_from: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    valid_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "valid_until IS NULL OR valid_from <= valid_until",
            name="ck_role_assignment_window",
        ),
        Index("ix_role_assignment_user_role", "user_id", "role_id"),
        Index("ix_role_assignment_role_id", "role_id"),
    )
