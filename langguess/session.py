"""
In-memory game sessions (one per open browser tab, never persisted).

A session moves PLAYING -> WON | LOST:
- every non-blank guess costs one try, including names that are not in the catalog
- guessing today's language wins
- using the last try without winning loses

Entering WON or LOST records the day's outcome through the tracker exactly once.
After that (or when the user had already played today) the session is locked:
further guesses and resets are refused. If saving the outcome fails, the
session stays finished with the outcome pending, and the next guess retries it.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime
from threading import Lock, RLock
from typing import Callable, Dict, List, Optional
from uuid import uuid4

import structlog

from .catalog import Catalog, LanguageRecord
from .engine import AttributeResult, FeedbackLine, hidden_attributes, score_guess
from .errors import (
    DuplicateAttemptError,
    NotFoundError,
    SessionLockedError,
    StoreError,
    UnauthenticatedError,
)
from .identity import CurrentUser
from .store import DailyTryRecord
from .tracker import DailyAttemptTracker
from .types import GameStatus

logger = structlog.get_logger(__name__)

LAST_TRY_MESSAGE = "This was your last attempt. You lost todays game. Please try again tomorrow."


class GameSession:
    def __init__(
        self,
        target: LanguageRecord,
        catalog: Catalog,
        user: Optional[CurrentUser],
        max_tries: int = 10,
        existing_try: Optional[DailyTryRecord] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.id = session_id or str(uuid4())
        self.target = target
        self.catalog = catalog
        self.user = user
        self.max_tries = max_tries
        self.existing_try = existing_try
        self.locked = existing_try is not None

        self.attempts = 0
        self.status: GameStatus = "PLAYING"
        self.attributes: Dict[str, AttributeResult] = hidden_attributes()
        self.log: List[FeedbackLine] = self._banner()

        self.started_on: date = date.today()
        self._outcome_recorded = False
        # One guess at a time per session, including its tracker write
        self._lock = Lock()

    @property
    def attempts_left(self) -> int:
        return max(self.max_tries - self.attempts, 0)

    @property
    def can_play(self) -> bool:
        return self.user is not None and not self.locked and self.status == "PLAYING"

    def _banner(self) -> List[FeedbackLine]:
        lines = [
            FeedbackLine("$ ./language-guesser", "command"),
            FeedbackLine("Checking your identity...", "info"),
        ]
        if self.user is None:
            lines.append(FeedbackLine("Identity check failure. Please log in to continue.", "error"))
            return lines

        lines.append(FeedbackLine(f"Identity check success. Welcome, {self.user.first_name}!", "success"))
        if self.existing_try is not None:
            if self.existing_try.success:
                lines.append(FeedbackLine("You have already WON today! Congratulations! See you tomorrow.", "info"))
            else:
                lines.append(FeedbackLine("You have already played today. Please try again tomorrow.", "error"))
        else:
            lines.extend([
                FeedbackLine("Initializing language database...", "info"),
                FeedbackLine("Loading game module...", "info"),
                FeedbackLine("All systems ready. Type a language name and press Enter to execute.", "success"),
            ])
        return lines

    def submit_guess(self, text: str, tracker: DailyAttemptTracker) -> List[FeedbackLine]:
        """Play one guess; returns the lines it appended to the log."""
        with self._lock:
            guess = (text or "").strip()
            if not guess:
                return []
            if self.status != "PLAYING":
                # Finished: state stays as it is, only an unsaved outcome is retried
                self._record_outcome(tracker)
                return []
            if self.user is None:
                raise UnauthenticatedError("Log in to play.")
            if self.locked:
                raise SessionLockedError("You have already played today.")

            self.attempts += 1
            is_last_try = self.attempts >= self.max_tries

            lines = [
                FeedbackLine("", "command"),
                FeedbackLine(f'$ execute --lang="{guess}"', "command"),
            ]

            if guess.lower() == self.target.name.lower():
                result = score_guess(self.target, self.target)
                self.attributes = result.attributes
                lines.extend(result.lines)
                lines.append(FeedbackLine("SUCCESS: All properties verified ✓", "success"))
                self.log.extend(lines)
                self._finish("WON", tracker)
                return lines

            try:
                guessed = self.catalog.get(guess)
            except NotFoundError as exc:
                guessed = None
                lines.append(FeedbackLine(f"ERROR: {exc}", "error"))
            else:
                result = score_guess(self.target, guessed)
                self.attributes = result.attributes
                lines.append(FeedbackLine(f'Comparing properties of "{guess}" with target language:', "info"))
                lines.extend(result.lines)

            if is_last_try:
                lines.append(FeedbackLine(LAST_TRY_MESSAGE, "error"))
                self.log.extend(lines)
                self._finish("LOST", tracker)
                return lines

            if guessed is None:
                lines.append(FeedbackLine("Try another language identifier.", "warning"))
            else:
                lines.append(FeedbackLine("Analysis complete. Try another language.", "info"))
            self.log.extend(lines)
            return lines

    @property
    def outcome_pending(self) -> bool:
        """Finished, but the day's outcome is not saved yet."""
        return self.status != "PLAYING" and not self._outcome_recorded

    def _finish(self, status: GameStatus, tracker: DailyAttemptTracker) -> None:
        self.status = status
        self.locked = True
        logger.info("session finished", session_id=self.id, status=status, attempts=self.attempts)
        self._record_outcome(tracker)

    def _record_outcome(self, tracker: DailyAttemptTracker) -> None:
        if self._outcome_recorded:
            return
        try:
            self.existing_try = tracker.record_attempt(self.user.id, success=(self.status == "WON"))
        except DuplicateAttemptError:
            # Another tab got there first; that try stands
            logger.warning("daily try already recorded", session_id=self.id, user_id=self.user.id)
        except StoreError as exc:
            # Left pending: the next call on this session tries again
            logger.error("daily try not saved", session_id=self.id, user_id=self.user.id, error=str(exc))
            raise
        self._outcome_recorded = True

    def reset(self) -> None:
        with self._lock:
            if self.user is None:
                raise UnauthenticatedError("Log in to play.")
            if self.locked:
                raise SessionLockedError("You have already played today.")

            self.attempts = 0
            self.status = "PLAYING"
            self.attributes = hidden_attributes()
            self._outcome_recorded = False
            self.log = self._banner()
            logger.info("session reset", session_id=self.id)


class SessionRegistry:
    """
    Holds live sessions in memory, keyed by session id.

    Bounded on every add:
    - sessions started on an earlier calendar day are dropped
    - each user (logged-out visitors count as one) keeps only the newest per_user sessions
    - at most max_sessions overall, oldest first
    A session whose outcome is still unsaved is only dropped once its day is over.
    """

    def __init__(
        self,
        per_user: int = 5,
        max_sessions: int = 10000,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()
        self._lock = RLock()
        self._per_user = per_user
        self._max_sessions = max_sessions
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def add(self, session: GameSession) -> GameSession:
        with self._lock:
            session.started_on = self._clock().date()
            self._sessions[session.id] = session
            self._prune(session)
        logger.info(
            "session started",
            session_id=session.id,
            user_id=session.user.id if session.user else None,
            locked=session.locked,
        )
        return session

    def _prune(self, newest: GameSession) -> None:
        today = self._clock().date()
        owner = newest.user.id if newest.user else None

        dropped = [sid for sid, s in self._sessions.items() if s.started_on < today]

        # Insertion order, so oldest first
        mine = [
            sid for sid, s in self._sessions.items()
            if (s.user.id if s.user else None) == owner and sid not in dropped
        ]
        extra = len(mine) - self._per_user
        for sid in mine:
            if extra <= 0:
                break
            if sid != newest.id and not self._sessions[sid].outcome_pending:
                dropped.append(sid)
                extra -= 1

        extra = len(self._sessions) - len(dropped) - self._max_sessions
        for sid, s in self._sessions.items():
            if extra <= 0:
                break
            if sid not in dropped and sid != newest.id and not s.outcome_pending:
                dropped.append(sid)
                extra -= 1

        for sid in dropped:
            del self._sessions[sid]
        if dropped:
            logger.debug("sessions dropped", count=len(dropped))

    def get(self, session_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
