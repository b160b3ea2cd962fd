"""create tables and table sessions

Revision ID: 202610011000
Revises: 202610010900
Create Date: 2026-10-01 10:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610011000"
down_revision = "202610010900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tables",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("active_session_id", sa.String(length=128), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("restaurant_id", "username", name="uq_tables_restaurant_username"),
        sa.CheckConstraint(
            "active_session_id IS NULL OR is_active",
            name="ck_tables_session_requires_active",
        ),
    )
    op.create_index("ix_tables_restaurant_id", "tables", ["restaurant_id"], unique=False)

    op.create_table(
        "table_sessions",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("table_username", sa.String(length=50), nullable=False),
        sa.Column("table_name", sa.String(length=255), nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_table_sessions_session_id", "table_sessions", ["session_id"], unique=False
    )
    op.create_index(
        "ix_table_sessions_restaurant_updated_at",
        "table_sessions",
        ["restaurant_id", "updated_at"],
        unique=False,
    )
    op.create_index(
        "uq_table_sessions_open_per_table",
        "table_sessions",
        ["restaurant_id", "table_username"],
        unique=True,
        postgresql_where=sa.text("end_time IS NULL"),
        sqlite_where=sa.text("end_time IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_table_sessions_open_per_table", table_name="table_sessions")
    op.drop_index("ix_table_sessions_restaurant_updated_at", table_name="table_sessions")
    op.drop_index("ix_table_sessions_session_id", table_name="table_sessions")
    op.drop_table("table_sessions")
    op.drop_index("ix_tables_restaurant_id", table_name="tables")
    op.drop_table("tables")
