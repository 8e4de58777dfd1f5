"""
Error taxonomy shared by the scorer, the daily stores and the session.

StoreError is the root of every persistence failure so callers can map
"the database is unhappy" to one HTTP status.
"""


class NotFoundError(LookupError):
    """Guessed language name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f'Language "{name}" not found in database.')
        self.name = name


class StoreError(RuntimeError):
    """Transient failure reading or writing the daily stores."""


class DuplicateRowError(StoreError):
    """An insert hit a uniqueness key (pick per day, try per user per day)."""


class PickUnavailableError(StoreError):
    """Today's pick could not be persisted after the configured retries."""


class DuplicateAttemptError(Exception):
    """The user already has a recorded try for today."""

    def __init__(self, user_id: str):
        super().__init__("Daily try already exists! Can't create another.")
        self.user_id = user_id


class SessionLockedError(Exception):
    """Guess or reset on a session whose user already played today."""


class UnauthenticatedError(Exception):
    """Guess or reset without an authenticated user."""
