"""create_rbac_tables

Revision ID: 4c1f7a2d9e30
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1f7a2d9e30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema - users, roles, permissions, links and the assignment ledger."""

    # btree_gist lets the exclusion constraint mix equality on ids with range overlap
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # Create app_user table
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute(
        "CREATE UNIQUE INDEX uq_app_user_username_lower ON app_user (lower(username))"
    )

    # Create role table
    op.create_table(
        "role",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute(
        "CREATE UNIQUE INDEX uq_role_active_name_lower ON role (lower(name)) "
        "WHERE is_active IS true"
    )

    # Create permission table
    op.create_table(
        "permission",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("permission_key", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("component_reference", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("permission_key", name="uq_permission_key"),
    )

    # Create role_permission table (many-to-many, no temporal bound)
    op.create_table(
        "role_permission",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("permission_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=True),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["permission_id"], ["permission.id"], ondelete="RESTRICT"
        ),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )
    op.create_index(
        "ix_role_permission_permission_id", "role_permission", ["permission_id"]
    )

    # Create role_assignment table (user-role grants with validity window)
    op.create_table(
        "role_assignment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("role_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=True),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "valid_until IS NULL OR valid_from <= valid_until",
            name="ck_role_assignment_window",
        ),
    )
    op.create_index(
        "ix_role_assignment_user_role", "role_assignment", ["user_id", "role_id"]
    )
    op.create_index("ix_role_assignment_role_id", "role_assignment", ["role_id"])
    # No two grants of one role to one user may share an instant; empty ranges never overlap
    op.execute(
        "ALTER TABLE role_assignment ADD CONSTRAINT ex_role_assignment_no_overlap "
        "EXCLUDE USING gist ("
        "user_id WITH =, role_id WITH =, "
        "tstzrange(valid_from, valid_until, '[)') WITH &&"
        ")"
    )


def downgrade() -> None:
    """Downgrade schema - remove RBAC tables."""

    op.drop_table("role_assignment")

    op.drop_index("ix_role_permission_permission_id", "role_permission")
    op.drop_table("role_permission")

    op.drop_table("permission")

    op.execute("DROP INDEX IF EXISTS uq_role_active_name_lower")
    op.drop_table("role")

    op.execute("DROP INDEX IF EXISTS uq_app_user_username_lower")
    op.drop_table("app_user")
