"""
SQLAlchemy ORM models.

Tables:
- daily_picks: one row per calendar day (the day's target language)
- daily_tries: one row per user per calendar day (the outcome)

Both tables are insert-only. The calendar day is stored next to the
timestamp so the database can enforce the uniqueness keys; the
application-side "already exists?" checks are only a fast path.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class DailyPick(Base):
    __tablename__ = "daily_picks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Catalog name of the language (catalog lives in code, so no real FK)
    language_name: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    # Local calendar date of created_at; at most one pick per day
    pick_date: Mapped[date] = mapped_column(Date, nullable=False, unique=True)


class DailyTry(Base):
    __tablename__ = "daily_tries"
    __table_args__ = (
        UniqueConstraint("user_id", "try_date", name="uq_daily_tries_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Opaque id from the identity provider
    user_id: Mapped[str] = mapped_column(String(191), nullable=False, index=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    try_date: Mapped[date] = mapped_column(Date, nullable=False)
