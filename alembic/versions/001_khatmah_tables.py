"""Users and per-juz readings.

Creates users (with the completed-Khatmah counter) and readings (one row per
user per juz, 1..30).

Revision ID: 001_khatmah_tables
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_khatmah_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("display_name", sa.String(64), nullable=False),
        sa.Column("khatmah_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint("khatmah_count >= 0", name="ck_users_khatmah_count_non_negative"),
    )
    op.create_index("idx_users_leaderboard", "users", ["khatmah_count", "username"])
    op.create_index("idx_users_username_lower", "users", [sa.text("lower(username)")], unique=True)

    # --- Readings ---
    op.create_table(
        "readings",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("juz_number", sa.Integer, nullable=False),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("user_id", "juz_number", name="uq_readings_user_juz"),
        sa.CheckConstraint("juz_number BETWEEN 1 AND 30", name="ck_readings_juz_range"),
    )
    op.create_index("ix_readings_user_id", "readings", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_readings_user_id", table_name="readings")
    op.drop_table("readings")
    op.drop_index("idx_users_username_lower", table_name="users")
    op.drop_index("idx_users_leaderboard", table_name="users")
    op.drop_table("users")
