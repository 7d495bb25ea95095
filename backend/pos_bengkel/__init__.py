# backend/pos_bengkel/__init__.py
from __future__ import annotations

import logging
import os

from flask import Flask
from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate

__version__ = "1.0.0"

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _register_error_handlers(app: Flask) -> None:
    from .routes.responses import error

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code == 404:
            return error("Endpoint not found", "the requested URL was not found on the server", 404)
        if exc.code == 405:
            return error("Method not allowed", exc.description or "method not allowed", 405)
        if exc.code == 413:
            limit_mb = app.config.get("BODY_LIMIT_MB")
            return error("Request body too large", f"request body exceeds {limit_mb} MB", 413)
        return error(exc.name, exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        app.logger.exception("Unhandled error")
        db.session.rollback()
        return error("Internal server error", "unexpected error", 500)


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)
    app.json.sort_keys = False

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR, render_as_batch=True)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Composition roots: repositories over the scoped session, usecases over repositories
    from .repositories import RepositoryManager
    from .services import UsecaseManager

    repos = RepositoryManager(lambda: db.session())
    app.extensions["pos_bengkel"] = UsecaseManager(repos)

    # Register blueprints
    from .routes import BLUEPRINTS

    for bp in BLUEPRINTS:
        app.register_blueprint(bp)

    _register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    db_url = make_url(app.config["SQLALCHEMY_DATABASE_URI"]).render_as_string(hide_password=True)
    app.logger.info("%s configured (db=%s)", app.config["APP_NAME"], db_url)
    return app
