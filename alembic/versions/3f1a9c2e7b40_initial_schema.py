"""initial schema: users, inventories, access_grants, items

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-19 09:12:44.310215

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _schema_columns() -> list[sa.Column]:
    cols = []
    for kind in ("string", "int", "bool"):
        for n in (1, 2, 3):
            cols.append(sa.Column(f"{kind}_field{n}_name", sa.String(100), nullable=True))
            cols.append(sa.Column(f"{kind}_field{n}_active", sa.Boolean(), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("role", sa.Enum("USER", "ADMIN", name="userrole"), nullable=False),
        sa.Column("theme", sa.Enum("LIGHT", "DARK", name="theme"), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "inventories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("creator_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("tags", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("custom_id_format", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("is_read_only", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_schema_columns(),
        *_timestamps(),
    )
    op.create_index("ix_inventories_creator_id", "inventories", ["creator_id"])

    op.create_table(
        "access_grants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("inventory_id", sa.Uuid(), sa.ForeignKey("inventories.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "access_level", sa.Enum("VIEWER", "EDITOR", name="accesslevel"), nullable=False
        ),
        *_timestamps(),
        sa.UniqueConstraint("inventory_id", "user_id", name="uq_access_grants_inventory_user"),
    )
    op.create_index("ix_access_grants_inventory_id", "access_grants", ["inventory_id"])
    op.create_index("ix_access_grants_user_id", "access_grants", ["user_id"])

    op.create_table(
        "items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("inventory_id", sa.Uuid(), sa.ForeignKey("inventories.id"), nullable=False),
        sa.Column("created_by_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("custom_id", sa.String(255), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *[sa.Column(f"string{n}", sa.String(1000), nullable=True) for n in (1, 2, 3)],
        *[sa.Column(f"int{n}", sa.Integer(), nullable=True) for n in (1, 2, 3)],
        *[sa.Column(f"bool{n}", sa.Boolean(), nullable=True) for n in (1, 2, 3)],
        *_timestamps(),
    )
    op.create_index("ix_items_inventory_id", "items", ["inventory_id"])


def downgrade() -> None:
    op.drop_index("ix_items_inventory_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_access_grants_user_id", table_name="access_grants")
    op.drop_index("ix_access_grants_inventory_id", table_name="access_grants")
    op.drop_table("access_grants")
    op.drop_index("ix_inventories_creator_id", table_name="inventories")
    op.drop_table("inventories")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="accesslevel").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="theme").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
