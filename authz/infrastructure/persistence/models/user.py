"""User ORM model (identity store). No credentials are stored here."""

from sqlalchemy import BigInteger, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import CatalogModel


class User(CatalogModel, Base):
    """User. Table: app_user. Unique lower(username)."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Bumped in the same transaction as any write that changes the user's
    # effective permissions; cached permission sets are keyed by it.
    permission_revision: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0, server_default="0"
    )


Index("uq_app_user_username_lower", func.lower(User.username), unique=True)
