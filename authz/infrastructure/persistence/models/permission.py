"""Permission and RolePermission ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import CatalogModel, CuidMixin


class Permission(CatalogModel, Base):
    """Permission. Table: permission. Unique permission_key (stable, never renamed)."""

    __tablename__ = "permission"

    permission_key: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    component_reference: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("permission_key", name="uq_permission_key"),
    )


class RolePermission(CuidMixin, Base):
    """Many-to-many role-permission. Table: role_permission. No temporal bound."""

    __tablename__ = "role_permission"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="RESTRICT"), nullable=False
    )
    permission_id: Mapped[str] = mapped_column(
        String, ForeignKey("permission.id", ondelete="RESTRICT"), nullable=False
    )
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
        Index("ix_role_permission_permission_id", "permission_id"),
    )
