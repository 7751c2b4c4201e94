"""Role ORM model. A named bundle of permissions."""

from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import CatalogModel


class Role(CatalogModel, Base):
    """Role. Table: role. Unique lower(name) among active roles."""

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


Index(
    "uq_role_active_name_lower",
    func.lower(Role.name),
    unique=True,
    postgresql_where=Role.is_active.is_(True),
)
