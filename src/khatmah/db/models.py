"""ORM models for users and their per-juz readings.

The schema is owned by Alembic (``alembic/versions``); these models must stay
in step with the migrations.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from khatmah.db.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
_BigIntId = BigInteger().with_variant(Integer, "sqlite")

TOTAL_JUZ = 30


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("khatmah_count >= 0", name="ck_users_khatmah_count_non_negative"),
        Index("idx_users_leaderboard", "khatmah_count", "username"),
    )

    id: Mapped[int] = mapped_column(_BigIntId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    display_name: Mapped[str] = mapped_column(String(64), nullable=False)
    khatmah_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    readings: Mapped[list[Reading]] = relationship(
        "Reading",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Reading.juz_number",
    )


# ---------------------------------------------------------------------------
# Readings
# ---------------------------------------------------------------------------


class Reading(Base):
    """One row per (user, juz). Every user owns exactly 30."""

    __tablename__ = "readings"
    __table_args__ = (
        UniqueConstraint("user_id", "juz_number", name="uq_readings_user_juz"),
        CheckConstraint(f"juz_number BETWEEN 1 AND {TOTAL_JUZ}", name="ck_readings_juz_range"),
    )

    id: Mapped[int] = mapped_column(_BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    juz_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship("User", back_populates="readings")
