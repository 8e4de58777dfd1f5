"""
Daily attempt tracker: at most one recorded outcome per user per calendar day.

The "already tried today?" read is only a fast path. The store's unique key on
(user, day) is the real guard, so a racing insert also ends in DuplicateAttemptError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

import structlog

from .errors import DuplicateAttemptError, DuplicateRowError
from .store import DailyStore, DailyTryRecord

logger = structlog.get_logger(__name__)


class DailyAttemptTracker:
    def __init__(self, store: DailyStore, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self._clock = clock

    def get_todays_try(self, user_id: str) -> Optional[DailyTryRecord]:
        today = self._clock().date()
        for daily_try in self.store.list_daily_tries(user_id):
            if daily_try.day == today:
                return daily_try
        return None

    def record_attempt(self, user_id: str, success: bool) -> DailyTryRecord:
        if self.get_todays_try(user_id) is not None:
            raise DuplicateAttemptError(user_id)

        try:
            daily_try = self.store.insert_daily_try(user_id, success, created_at=self._clock())
        except DuplicateRowError as exc:
            raise DuplicateAttemptError(user_id) from exc

        logger.info("daily try recorded", user_id=user_id, success=success)
        return daily_try
