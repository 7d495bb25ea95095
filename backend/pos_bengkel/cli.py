# Overview: Server entry point and Flask CLI maintenance commands.

# backend/pos_bengkel/cli.py
# Commands Legend:
# Server:
# - pos-bengkel serve [--host 0.0.0.0] [--port 8080]
#   Run the API server. Exit 0 on Ctrl-C, 1 if the port cannot be bound.
#
# Schema (production goes through Flask-Migrate):
# - flask --app pos_bengkel db upgrade
#   Apply migrations from backend/migrations.
#
# DEV/TEST helpers:
# - flask --app pos_bengkel system create-tables
#   Create all tables from the models (no migration history).
# - flask --app pos_bengkel system drop-tables --yes
#   Drop all tables (deletes all data).

import click
from flask.cli import with_appcontext
from werkzeug.serving import make_server

from . import create_app
from .extensions import db


@click.group()
@click.version_option(package_name="pos-bengkel")
def main():
    """POS Bengkel API server."""


@main.command("serve")
@click.option("--host", default=None, help="Interface to bind (default: HOST or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Port to bind (default: PORT or 8080)")
def serve(host, port):
    """Run the HTTP server until interrupted."""
    app = create_app()
    host = host or app.config["HOST"]
    port = port or app.config["PORT"]

    try:
        server = make_server(host, port, app, threaded=True)
    except (OSError, SystemExit) as exc:
        # werkzeug reports EADDRINUSE itself and exits; either way the bind failed
        app.logger.error("could not bind %s:%s (%s)", host, port, exc)
        click.echo(f"FAIL could not bind {host}:{port}", err=True)
        raise SystemExit(1)

    app.logger.info("%s listening on http://%s:%s", app.config["APP_NAME"], host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("Shutting down")
    finally:
        server.server_close()


@click.group("system")
def system_group():
    """Schema helpers for development and tests."""


@system_group.command("create-tables")
@with_appcontext
def create_tables():
    """Create every table from the model metadata."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command("drop-tables")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@with_appcontext
def drop_tables(yes):
    """
    DANGER: Drop all tables.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)
    db.drop_all()
    click.echo("PASS All tables dropped.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
