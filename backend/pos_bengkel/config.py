# backend/pos_bengkel/config.py
from __future__ import annotations
import os

from sqlalchemy.pool import StaticPool


def _database_url() -> str:
    url = os.environ.get(
        "DATABASE_URL",  # DSN of the relational store
        "sqlite:///pos_bengkel.sqlite3",  # default local location
    )
    # Heroku/Azure style DSNs use the deprecated scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def engine_options_for(url: str, timeout_seconds: int) -> dict:
    """
    Engine options that bound DB work by the per-request budget.

    PostgreSQL aborts statements after statement_timeout; SQLite waits at most
    timeout seconds for a competing writer before raising "database is locked".
    """
    if url.startswith("sqlite"):
        options: dict = {"connect_args": {"timeout": timeout_seconds, "check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # one shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
        return options

    if url.startswith("postgresql"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"options": f"-c statement_timeout={timeout_seconds * 1000}"},
        }

    return {"pool_pre_ping": True}


class Config:
    APP_NAME = os.environ.get("APP_NAME", "POS Bengkel API")

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "8080"))

    # Request body limit, configured in MB
    BODY_LIMIT_MB = int(os.environ.get("BODY_LIMIT_MB", "4"))
    MAX_CONTENT_LENGTH = BODY_LIMIT_MB * 1024 * 1024

    REQUEST_TIMEOUT_SECONDS = int(os.environ.get("REQUEST_TIMEOUT_SECONDS", "30"))

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI, REQUEST_TIMEOUT_SECONDS)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # bcrypt cost factor for user passwords
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI, 5)
    LOG_LEVEL = "WARNING"
    BCRYPT_ROUNDS = 4
