"""
Daily pick selector: exactly one target language per calendar day.

ensure_todays_pick():
1. Read all picks; if one was created today (local calendar date), reuse it.
2. Otherwise choose a language uniformly at random and insert it.
3. If the insert hits the one-pick-per-day key, somebody else won the race:
   re-read and return their pick instead of ours.
4. Other store failures are retried with doubling backoff, then give up with
   PickUnavailableError. A pick is never returned unless it is persisted.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Optional, Tuple

import structlog

from .catalog import Catalog
from .errors import DuplicateRowError, PickUnavailableError, StoreError
from .random_client import fetch_index
from .store import DailyPickRecord, DailyStore

logger = structlog.get_logger(__name__)


class DailyPickSelector:
    def __init__(
        self,
        store: DailyStore,
        catalog: Catalog,
        *,
        randbelow: Callable[[int], int] = fetch_index,
        clock: Callable[[], datetime] = datetime.now,
        max_attempts: int = 5,
        backoff_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.catalog = catalog
        self._randbelow = randbelow
        self._clock = clock
        self._max_attempts = max_attempts
        self._backoff = backoff_seconds
        self._sleep = sleep

    def _find_todays_pick(self) -> Optional[DailyPickRecord]:
        today = self._clock().date()
        for pick in self.store.list_daily_picks():
            if pick.day == today:
                return pick
        return None

    def get_todays_pick(self) -> Optional[str]:
        """Name of today's language, or None if nothing is picked yet."""
        pick = self._find_todays_pick()
        return pick.language_name if pick else None

    def ensure_todays_pick(self) -> Tuple[str, bool]:
        """Returns (language name, was already picked)."""
        existing = self._find_todays_pick()
        if existing:
            logger.debug("daily pick reused", language=existing.language_name)
            return existing.language_name, True

        language = self.catalog.choose(self._randbelow)

        attempt = 1
        while True:
            try:
                pick = self.store.insert_daily_pick(language.name, created_at=self._clock())
            except DuplicateRowError:
                winner = self._find_todays_pick()
                if winner is None:
                    # Key clash but nothing for today: the clash was not ours to resolve
                    raise
                logger.info("daily pick race lost", ours=language.name, language=winner.language_name)
                return winner.language_name, True
            except StoreError as exc:
                if attempt >= self._max_attempts:
                    logger.error("daily pick insert gave up", attempts=attempt, error=str(exc))
                    raise PickUnavailableError(
                        f"Could not save today's pick after {attempt} attempt(s)."
                    ) from exc
                delay = self._backoff * (2 ** (attempt - 1))
                logger.warning("daily pick insert failed, retrying", attempt=attempt, delay=delay, error=str(exc))
                self._sleep(delay)
                attempt += 1
                continue

            logger.info("daily pick created", language=pick.language_name, day=pick.day.isoformat())
            return pick.language_name, False
