"""
Testing the game session state machine
- PLAYING -> WON / LOST, attempts, log lines
- the day's outcome is recorded exactly once
"""

from datetime import timedelta

import pytest

from langguess.errors import SessionLockedError, StoreError, UnauthenticatedError
from langguess.identity import CurrentUser
from langguess.session import LAST_TRY_MESSAGE, GameSession, SessionRegistry
from langguess.store import InMemoryDailyStore
from langguess.tracker import DailyAttemptTracker

ALICE = CurrentUser(id="alice", display_name="Alice Liddell")
BOB = CurrentUser(id="bob", display_name="Bob")


class FlakyTryStore(InMemoryDailyStore):
    """Try inserts fail the first `failures` times, like a dropped DB connection."""

    def __init__(self, failures=1):
        super().__init__()
        self.failures = failures

    def insert_daily_try(self, user_id, success, created_at=None):
        if self.failures > 0:
            self.failures -= 1
            raise StoreError("Could not save daily try.")
        return super().insert_daily_try(user_id, success, created_at=created_at)


class SpyTracker(DailyAttemptTracker):
    def __init__(self, store, clock):
        super().__init__(store, clock=clock)
        self.calls = []

    def record_attempt(self, user_id, success):
        self.calls.append((user_id, success))
        return super().record_attempt(user_id, success)


@pytest.fixture
def store():
    return InMemoryDailyStore()


@pytest.fixture
def tracker(store, clock):
    return SpyTracker(store, clock)


@pytest.fixture
def game(rust, small_catalog):
    return GameSession(target=rust, catalog=small_catalog, user=ALICE, max_tries=3)


def test_new_session_is_hidden_and_playing(game):
    assert game.status == "PLAYING"
    assert game.attempts == 0
    assert game.can_play is True
    assert all(r.match == "hidden" for r in game.attributes.values())
    assert "Identity check success. Welcome, Alice!" in [line.text for line in game.log]


def test_wrong_guess_reveals_target_values(game, tracker):
    lines = game.submit_guess("javascript", tracker)

    assert game.attempts == 1
    assert game.status == "PLAYING"
    first_appeared = game.attributes["firstAppeared"]
    assert (first_appeared.value, first_appeared.match, first_appeared.direction) == (2010, "wrong", "up")
    assert game.attributes["typing"].match == "wrong"
    assert game.attributes["garbageCollection"].match == "wrong"
    assert game.attributes["garbageCollection"].value is False

    texts = [line.text for line in lines]
    assert texts[1] == '$ execute --lang="javascript"'
    assert 'Comparing properties of "javascript" with target language:' in texts
    assert "first_appeared: ✗ ↑" in texts
    assert texts[-1] == "Analysis complete. Try another language."
    assert tracker.calls == []


def test_blank_guess_is_ignored(game, tracker):
    log_size = len(game.log)
    assert game.submit_guess("   ", tracker) == []
    assert game.attempts == 0
    assert len(game.log) == log_size


def test_unknown_language_costs_a_try(game, tracker):
    lines = game.submit_guess("Brainfork", tracker)

    assert game.attempts == 1
    assert game.status == "PLAYING"
    assert all(r.match == "hidden" for r in game.attributes.values())
    assert [line.text for line in lines][-2:] == [
        'ERROR: Language "Brainfork" not found in database.',
        "Try another language identifier.",
    ]


def test_correct_guess_wins_and_records_once(game, tracker, store):
    game.submit_guess("javascript", tracker)
    lines = game.submit_guess("  RUST ", tracker)

    assert game.status == "WON"
    assert game.attempts == 2
    assert all(r.match == "exact" for r in game.attributes.values())
    assert [line.text for line in lines][-2:] == [
        "Match found! Language identified: Rust",
        "SUCCESS: All properties verified ✓",
    ]
    assert tracker.calls == [("alice", True)]

    # Re-observing the finished game does not record again
    assert game.submit_guess("rust", tracker) == []
    assert tracker.calls == [("alice", True)]
    assert len(store.list_daily_tries("alice")) == 1


def test_running_out_of_tries_loses_once(game, tracker, store):
    game.submit_guess("javascript", tracker)
    game.submit_guess("javascript", tracker)
    lines = game.submit_guess("nope", tracker)

    assert game.status == "LOST"
    assert game.attempts == 3
    assert game.attempts_left == 0
    assert lines[-1].text == LAST_TRY_MESSAGE
    assert tracker.calls == [("alice", False)]

    game.submit_guess("javascript", tracker)
    assert game.attempts == 3
    assert tracker.calls == [("alice", False)]
    assert store.list_daily_tries("alice")[0].success is False


def test_last_try_can_still_win(rust, small_catalog, tracker):
    game = GameSession(target=rust, catalog=small_catalog, user=ALICE, max_tries=1)
    game.submit_guess("Rust", tracker)
    assert game.status == "WON"
    assert tracker.calls == [("alice", True)]


def test_other_tab_already_recorded(game, tracker, store, clock):
    # Another tab finished first; this one must not blow up
    store.insert_daily_try("alice", False, created_at=clock())

    game.submit_guess("rust", tracker)

    assert game.status == "WON"
    assert tracker.calls == [("alice", True)]
    assert len(store.list_daily_tries("alice")) == 1


def test_reset_clears_state(game, tracker):
    game.submit_guess("javascript", tracker)
    game.reset()

    assert game.attempts == 0
    assert game.status == "PLAYING"
    assert all(r.match == "hidden" for r in game.attributes.values())


def test_finished_session_cannot_reset(game, tracker):
    game.submit_guess("rust", tracker)
    with pytest.raises(SessionLockedError):
        game.reset()


def test_existing_try_locks_session(rust, small_catalog, tracker, store, clock):
    existing = store.insert_daily_try("alice", True, created_at=clock())
    game = GameSession(target=rust, catalog=small_catalog, user=ALICE, existing_try=existing)

    # Still PLAYING internally; the lock is what stops input
    assert game.status == "PLAYING"
    assert game.locked is True
    assert game.can_play is False
    assert game.log[-1].text == "You have already WON today! Congratulations! See you tomorrow."
    with pytest.raises(SessionLockedError):
        game.submit_guess("rust", tracker)
    with pytest.raises(SessionLockedError):
        game.reset()
    assert tracker.calls == []


def test_logged_out_session(rust, small_catalog, tracker):
    game = GameSession(target=rust, catalog=small_catalog, user=None)

    assert game.can_play is False
    assert game.log[-1].text == "Identity check failure. Please log in to continue."
    with pytest.raises(UnauthenticatedError):
        game.submit_guess("rust", tracker)
    with pytest.raises(UnauthenticatedError):
        game.reset()


def test_registry(game):
    registry = SessionRegistry()
    registry.add(game)
    assert registry.get(game.id) is game
    registry.clear()
    assert registry.get(game.id) is None


def test_failed_save_keeps_outcome_pending_and_retries(game, clock):
    store = FlakyTryStore(failures=1)
    tracker = SpyTracker(store, clock)

    with pytest.raises(StoreError):
        game.submit_guess("rust", tracker)

    # The game is over, but the try is not saved yet
    assert game.status == "WON"
    assert game.outcome_pending is True
    assert store.list_daily_tries("alice") == []

    # Any later guess on this session saves it; nothing else changes
    assert game.submit_guess("javascript", tracker) == []
    assert game.outcome_pending is False
    assert game.attempts == 1
    assert [t.success for t in store.list_daily_tries("alice")] == [True]
    assert tracker.calls == [("alice", True), ("alice", True)]

    # A new tab the same day sees the try and is locked
    fresh = GameSession(
        target=game.target,
        catalog=game.catalog,
        user=ALICE,
        existing_try=tracker.get_todays_try("alice"),
    )
    assert fresh.locked is True


def test_failed_save_on_last_try_keeps_loss_pending(rust, small_catalog, clock):
    store = FlakyTryStore(failures=2)
    tracker = DailyAttemptTracker(store, clock=clock)
    game = GameSession(target=rust, catalog=small_catalog, user=ALICE, max_tries=1)

    with pytest.raises(StoreError):
        game.submit_guess("javascript", tracker)
    with pytest.raises(StoreError):
        game.submit_guess("javascript", tracker)
    assert game.status == "LOST"
    assert game.outcome_pending is True

    game.submit_guess("javascript", tracker)
    assert game.outcome_pending is False
    assert store.list_daily_tries("alice")[0].success is False


def _new_game(target, catalog, user=ALICE):
    return GameSession(target=target, catalog=catalog, user=user)


def test_registry_keeps_newest_sessions_per_user(rust, small_catalog, clock):
    registry = SessionRegistry(per_user=2, clock=clock)
    first, second, third = (registry.add(_new_game(rust, small_catalog)) for _ in range(3))
    bobs = registry.add(_new_game(rust, small_catalog, user=BOB))

    assert registry.get(first.id) is None
    assert registry.get(second.id) is second
    assert registry.get(third.id) is third
    assert registry.get(bobs.id) is bobs
    assert len(registry) == 3


def test_registry_caps_logged_out_visitors_together(rust, small_catalog, clock):
    registry = SessionRegistry(per_user=3, clock=clock)
    for _ in range(50):
        registry.add(_new_game(rust, small_catalog, user=None))
    assert len(registry) == 3


def test_registry_total_cap(rust, small_catalog, clock):
    registry = SessionRegistry(per_user=5, max_sessions=2, clock=clock)
    users = [CurrentUser(id=f"user-{n}", display_name="") for n in range(4)]
    added = [registry.add(_new_game(rust, small_catalog, user=u)) for u in users]

    assert len(registry) == 2
    assert [registry.get(s.id) for s in added] == [None, None, added[2], added[3]]


def test_registry_drops_sessions_from_earlier_days(rust, small_catalog, clock):
    now = [clock()]
    registry = SessionRegistry(clock=lambda: now[0])
    yesterday = registry.add(_new_game(rust, small_catalog))

    now[0] = clock() + timedelta(days=1)
    today = registry.add(_new_game(rust, small_catalog, user=BOB))

    assert registry.get(yesterday.id) is None
    assert registry.get(today.id) is today


def test_registry_keeps_session_with_unsaved_outcome(rust, small_catalog, clock):
    registry = SessionRegistry(per_user=1, clock=clock)
    pending = registry.add(_new_game(rust, small_catalog))
    with pytest.raises(StoreError):
        pending.submit_guess("rust", DailyAttemptTracker(FlakyTryStore(), clock=clock))

    newer = registry.add(_new_game(rust, small_catalog))

    # Over the limit, but dropping it would lose the game's result
    assert registry.get(pending.id) is pending
    assert registry.get(newer.id) is newer
