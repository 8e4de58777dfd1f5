"""
Single place to read settings from the environment.

A local .env is loaded if present (dev convenience; in prod the platform injects env vars).
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./langguess.db"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    app_env: str = "local"
    store_backend: str = "db"          # "db" | "memory"
    max_tries: int = 10
    pick_max_attempts: int = 5
    pick_backoff_seconds: float = 0.1
    random_org_enabled: bool = True
    sessions_per_user: int = 5
    max_sessions: int = 10000
    log_level: str = "INFO"
    log_format: str = "console"        # "console" | "json"


def load_settings() -> Settings:
    store_backend = os.getenv("STORE_BACKEND", "db").lower()
    if store_backend not in ("db", "memory"):
        raise RuntimeError(f"STORE_BACKEND must be 'db' or 'memory', got {store_backend!r}.")

    max_tries = int(os.getenv("MAX_TRIES", "10"))
    if max_tries < 1:
        raise RuntimeError("MAX_TRIES must be at least 1.")

    pick_max_attempts = int(os.getenv("PICK_MAX_ATTEMPTS", "5"))
    if pick_max_attempts < 1:
        raise RuntimeError("PICK_MAX_ATTEMPTS must be at least 1.")

    return Settings(
        database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
        app_env=os.getenv("APP_ENV", "local"),
        store_backend=store_backend,
        max_tries=max_tries,
        pick_max_attempts=pick_max_attempts,
        pick_backoff_seconds=float(os.getenv("PICK_BACKOFF_SECONDS", "0.1")),
        random_org_enabled=_env_bool("RANDOM_ORG_ENABLED", True),
        sessions_per_user=max(int(os.getenv("SESSIONS_PER_USER", "5")), 1),
        max_sessions=max(int(os.getenv("MAX_SESSIONS", "10000")), 1),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "console").lower(),
    )


settings = load_settings()
