'''
Language Guesser API

Daily game:
GET  /api/daily/pick-lang      -> make sure today's language exists (idempotent)
GET  /api/daily/today          -> read today's language (null if not picked yet)
GET  /languages                -> every language name you can guess

Sessions (one per browser tab, kept in memory):
POST /sessions                 -> start a session against today's language
GET  /sessions/{id}            -> read state & log
POST /sessions/{id}/guess      -> submit a guess
POST /sessions/{id}/reset      -> start over (only before today's try is recorded)

Extras:
GET  /me/today                 -> the caller's recorded try for today

Identity comes from the X-User-Id / X-User-Name headers.
'''

from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .bootstrap_db import create_all    # dev-only: create tables
from .catalog import DEFAULT_CATALOG
from .config import settings
from .db import get_db                  # SQLAlchemy Session dependency
from .errors import SessionLockedError, StoreError, UnauthenticatedError
from .identity import CurrentUser, current_user
from .logging_config import configure_logging
from .picker import DailyPickSelector
from .random_client import fetch_index
from .repository import DBDailyStore     # DB-backed store
from .session import GameSession, SessionRegistry
from .store import DailyStore, InMemoryDailyStore
from .tracker import DailyAttemptTracker

from .schemas import (
    AttributeOut,
    DailyPickOut,
    DailyTryOut,
    FeedbackLineOut,
    GuessRequest,
    GuessResponse,
    SessionState,
    TodaysPickOut,
    TodaysTryOut,
)

configure_logging(settings.log_level, settings.log_format)

app = FastAPI(title="Language Guesser API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if settings.app_env == "local" and settings.store_backend == "db":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

CATALOG = DEFAULT_CATALOG
sessions = SessionRegistry(per_user=settings.sessions_per_user, max_sessions=settings.max_sessions)
memory_store = InMemoryDailyStore()


@app.exception_handler(StoreError)
def _store_unavailable(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Small factories so routes get per-request collaborators (bound to the current DB session)
def get_store(session = Depends(get_db)) -> DailyStore:
    if settings.store_backend == "memory":
        return memory_store
    return DBDailyStore(session)


def get_picker(store: DailyStore = Depends(get_store)) -> DailyPickSelector:
    return DailyPickSelector(
        store,
        CATALOG,
        randbelow=lambda upper: fetch_index(upper, use_remote=settings.random_org_enabled),
        max_attempts=settings.pick_max_attempts,
        backoff_seconds=settings.pick_backoff_seconds,
    )


def get_tracker(store: DailyStore = Depends(get_store)) -> DailyAttemptTracker:
    return DailyAttemptTracker(store)


def _attributes_out(session: GameSession) -> dict:
    out = {}
    for key, result in session.attributes.items():
        value = list(result.value) if isinstance(result.value, tuple) else result.value
        out[key] = AttributeOut(value=value, match=result.match, direction=result.direction)
    return out


def _revealed_language(session: GameSession) -> Optional[str]:
    return session.target.name if session.status != "PLAYING" else None


def _to_session_state(session: GameSession) -> SessionState:
    return SessionState(
        session_id=session.id,
        status=session.status,
        attempts=session.attempts,
        attempts_left=session.attempts_left,
        max_tries=session.max_tries,
        can_play=session.can_play,
        locked=session.locked,
        outcome_pending=session.outcome_pending,
        attributes=_attributes_out(session),
        log=[FeedbackLineOut(text=line.text, kind=line.kind) for line in session.log],
        language=_revealed_language(session),
    )


def _owned_session(session_id: str, user: Optional[CurrentUser]) -> GameSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.user is not None and (user is None or user.id != session.user.id):
        raise HTTPException(status_code=403, detail="This session belongs to another user")
    return session

# ---------------- Routes ----------------

@app.get("/api/daily/pick-lang", response_model=DailyPickOut, summary="Pick today's language (idempotent)")
def pick_todays_language(picker: DailyPickSelector = Depends(get_picker)) -> DailyPickOut:
    language, already_picked = picker.ensure_todays_pick()
    return DailyPickOut(already_picked=already_picked, language=language)


@app.get("/api/daily/today", response_model=TodaysPickOut, summary="Read today's language")
def get_todays_language(picker: DailyPickSelector = Depends(get_picker)) -> TodaysPickOut:
    return TodaysPickOut(language=picker.get_todays_pick())


@app.get("/languages", response_model=list[str], summary="List guessable languages")
def list_languages() -> list[str]:
    return CATALOG.names()


@app.get("/me/today", response_model=TodaysTryOut, summary="Get the caller's try for today")
def get_my_try(
    user: Optional[CurrentUser] = Depends(current_user),
    tracker: DailyAttemptTracker = Depends(get_tracker),
) -> TodaysTryOut:
    if user is None:
        raise HTTPException(status_code=401, detail="Log in to see your daily try")
    daily_try = tracker.get_todays_try(user.id)
    if daily_try is None:
        return TodaysTryOut(daily_try=None)
    return TodaysTryOut(
        daily_try=DailyTryOut(success=daily_try.success, created_at=daily_try.created_at.timestamp())
    )


@app.post("/sessions", response_model=SessionState, summary="Start a game session")
def start_session(
    user: Optional[CurrentUser] = Depends(current_user),
    picker: DailyPickSelector = Depends(get_picker),
    tracker: DailyAttemptTracker = Depends(get_tracker),
) -> SessionState:
    language, _ = picker.ensure_todays_pick()
    target = CATALOG.find(language)
    if target is None:
        raise HTTPException(status_code=500, detail=f"Today's language {language!r} is not in the catalog")

    existing_try = tracker.get_todays_try(user.id) if user else None
    session = sessions.add(GameSession(
        target=target,
        catalog=CATALOG,
        user=user,
        max_tries=settings.max_tries,
        existing_try=existing_try,
    ))
    return _to_session_state(session)


@app.get("/sessions/{session_id}", response_model=SessionState, summary="Get current session state")
def get_session(
    session_id: str,
    user: Optional[CurrentUser] = Depends(current_user),
) -> SessionState:
    return _to_session_state(_owned_session(session_id, user))


@app.post("/sessions/{session_id}/guess", response_model=GuessResponse, summary="Submit a guess")
def submit_guess(
    session_id: str,
    payload: GuessRequest,
    user: Optional[CurrentUser] = Depends(current_user),
    tracker: DailyAttemptTracker = Depends(get_tracker),
) -> GuessResponse:
    session = _owned_session(session_id, user)
    try:
        lines = session.submit_guess(payload.guess, tracker)
    except UnauthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except SessionLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    return GuessResponse(
        status=session.status,
        attempts_left=session.attempts_left,
        feedback=[FeedbackLineOut(text=line.text, kind=line.kind) for line in lines],
        attributes=_attributes_out(session),
        language=_revealed_language(session),
        note=(f"Game {session.status}. No more guesses allowed."
              if session.status != "PLAYING" else None),
    )


@app.post("/sessions/{session_id}/reset", response_model=SessionState, summary="Reset the session")
def reset_session(
    session_id: str,
    user: Optional[CurrentUser] = Depends(current_user),
) -> SessionState:
    session = _owned_session(session_id, user)
    try:
        session.reset()
    except UnauthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except SessionLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _to_session_state(session)
