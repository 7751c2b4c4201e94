"""add_user_permission_revision

Revision ID: 8b2e6d41c5fa
Revises: 4c1f7a2d9e30
Create Date: 2026-10-18 15:40:07.281946

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b2e6d41c5fa"
down_revision: Union[str, Sequence[str], None] = "4c1f7a2d9e30"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - per-user permission revision for cache keys."""
    op.add_column(
        "app_user",
        sa.Column(
            "permission_revision",
            sa.BigInteger(),
            server_default=sa.text("0"),
            nullable=False,
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("app_user", "permission_revision")
