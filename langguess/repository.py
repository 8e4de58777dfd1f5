"""
DB-backed daily store that mirrors the in-memory InMemoryDailyStore API.

Public methods:
- list_daily_picks() -> list[DailyPickRecord]
- insert_daily_pick(language_name, created_at=None) -> DailyPickRecord
- list_daily_tries(user_id) -> list[DailyTryRecord]
- insert_daily_try(user_id, success, created_at=None) -> DailyTryRecord

Database errors never leak out as SQLAlchemy exceptions:
a violated unique key becomes DuplicateRowError, anything else StoreError.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DuplicateRowError, StoreError
from .models import DailyPick as DailyPickORM, DailyTry as DailyTryORM
from .store import DailyPickRecord, DailyTryRecord

logger = structlog.get_logger(__name__)


# --- Small DTO builders so callers never hold ORM rows ---

def _to_pick(row: DailyPickORM) -> DailyPickRecord:
    return DailyPickRecord(id=row.id, language_name=row.language_name, created_at=row.created_at)


def _to_try(row: DailyTryORM) -> DailyTryRecord:
    return DailyTryRecord(id=row.id, user_id=row.user_id, success=row.success, created_at=row.created_at)


class DBDailyStore:
    """Drop-in replacement for InMemoryDailyStore, backed by SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _insert(self, row, what: str):
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateRowError(f"{what} already exists.") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("daily store write failed", table=row.__tablename__, error=str(exc))
            raise StoreError(f"Could not save {what}.") from exc
        self.db.refresh(row)
        return row

    def _read(self, stmt, what: str):
        try:
            return self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("daily store read failed", what=what, error=str(exc))
            raise StoreError(f"Could not read {what}.") from exc

    # --- Picks ---

    def list_daily_picks(self) -> List[DailyPickRecord]:
        rows = self._read(select(DailyPickORM).order_by(DailyPickORM.created_at.asc()), "daily picks")
        return [_to_pick(r) for r in rows]

    def insert_daily_pick(self, language_name: str, created_at: Optional[datetime] = None) -> DailyPickRecord:
        created_at = created_at or datetime.now()
        row = DailyPickORM(
            language_name=language_name,
            created_at=created_at,
            pick_date=created_at.date(),
        )
        return _to_pick(self._insert(row, f"Daily pick for {created_at.date().isoformat()}"))

    # --- Tries ---

    def list_daily_tries(self, user_id: str) -> List[DailyTryRecord]:
        stmt = (
            select(DailyTryORM)
            .where(DailyTryORM.user_id == user_id)
            .order_by(DailyTryORM.created_at.asc())
        )
        return [_to_try(r) for r in self._read(stmt, "daily tries")]

    def insert_daily_try(
        self, user_id: str, success: bool, created_at: Optional[datetime] = None
    ) -> DailyTryRecord:
        created_at = created_at or datetime.now()
        row = DailyTryORM(
            user_id=user_id,
            success=success,
            created_at=created_at,
            try_date=created_at.date(),
        )
        return _to_try(self._insert(row, f"Daily try for {user_id} on {created_at.date().isoformat()}"))
