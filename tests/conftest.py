"""
- Spins up a temp test DB (SQLite in memory)
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
"""
import os
from datetime import datetime
from typing import Generator

import pytest

# Ensure the app does NOT run dev-only startup hooks or call random.org
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("STORE_BACKEND", "db")
os.environ.setdefault("RANDOM_ORG_ENABLED", "0")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from langguess.catalog import Catalog, LanguageRecord
from langguess.db import Base, get_db
from langguess.main import app, sessions
from langguess import models  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# A fixed "now" so calendar-day logic is deterministic
NOW = datetime(2024, 5, 17, 12, 30)


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The stores commit on every insert, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM daily_tries"))
        conn.execute(text("DELETE FROM daily_picks"))
    sessions.clear()
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def javascript() -> LanguageRecord:
    return LanguageRecord(
        name="JavaScript",
        paradigm=("Object-oriented", "Functional", "Event-driven"),
        typing="Dynamic",
        garbage_collection=True,
        designed_by="Brendan Eich",
        first_appeared=1995,
        main_use_case="Web",
    )


@pytest.fixture
def rust() -> LanguageRecord:
    return LanguageRecord(
        name="Rust",
        paradigm=("Multi-paradigm", "Concurrent"),
        typing="Static",
        garbage_collection=False,
        designed_by="Graydon Hoare",
        first_appeared=2010,
        main_use_case="Systems",
    )


@pytest.fixture
def small_catalog(javascript, rust) -> Catalog:
    return Catalog([javascript, rust])
