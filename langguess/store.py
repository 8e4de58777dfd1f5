"""
Daily stores: what the picker and tracker need from persistence.

- DailyStore: the four calls the core makes (list/insert picks, list/insert tries)
- InMemoryDailyStore: process-local store, used with STORE_BACKEND=memory and in tests

Both stores enforce the uniqueness keys themselves:
one pick per calendar day, one try per (user, calendar day).
A second insert raises DuplicateRowError.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from itertools import count
from threading import RLock
from typing import Dict, List, Optional, Protocol, Tuple

from .errors import DuplicateRowError


@dataclass(frozen=True)
class DailyPickRecord:
    id: int
    language_name: str
    created_at: datetime

    @property
    def day(self) -> date:
        return self.created_at.date()


@dataclass(frozen=True)
class DailyTryRecord:
    id: int
    user_id: str
    success: bool
    created_at: datetime

    @property
    def day(self) -> date:
        return self.created_at.date()


class DailyStore(Protocol):
    def list_daily_picks(self) -> List[DailyPickRecord]: ...

    def insert_daily_pick(self, language_name: str, created_at: Optional[datetime] = None) -> DailyPickRecord: ...

    def list_daily_tries(self, user_id: str) -> List[DailyTryRecord]: ...

    def insert_daily_try(
        self, user_id: str, success: bool, created_at: Optional[datetime] = None
    ) -> DailyTryRecord: ...


class InMemoryDailyStore:
    def __init__(self) -> None:
        self._lock = RLock()
        self._ids = count(1)
        self._picks: Dict[date, DailyPickRecord] = {}
        self._tries: Dict[Tuple[str, date], DailyTryRecord] = {}

    def list_daily_picks(self) -> List[DailyPickRecord]:
        with self._lock:
            return sorted(self._picks.values(), key=lambda p: p.created_at)

    def insert_daily_pick(self, language_name: str, created_at: Optional[datetime] = None) -> DailyPickRecord:
        created_at = created_at or datetime.now()
        with self._lock:
            if created_at.date() in self._picks:
                raise DuplicateRowError(f"A language is already picked for {created_at.date().isoformat()}.")
            pick = DailyPickRecord(id=next(self._ids), language_name=language_name, created_at=created_at)
            self._picks[pick.day] = pick
            return pick

    def list_daily_tries(self, user_id: str) -> List[DailyTryRecord]:
        with self._lock:
            tries = [t for t in self._tries.values() if t.user_id == user_id]
        return sorted(tries, key=lambda t: t.created_at)

    def insert_daily_try(
        self, user_id: str, success: bool, created_at: Optional[datetime] = None
    ) -> DailyTryRecord:
        created_at = created_at or datetime.now()
        key = (user_id, created_at.date())
        with self._lock:
            if key in self._tries:
                raise DuplicateRowError(f"User {user_id} already has a try for {created_at.date().isoformat()}.")
            daily_try = DailyTryRecord(id=next(self._ids), user_id=user_id, success=success, created_at=created_at)
            self._tries[key] = daily_try
            return daily_try
