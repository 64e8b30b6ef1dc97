"""Flask CLI command that creates the database schema."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from wallet_api.core.extensions import db

LOGGER = logging.getLogger(__name__)


def _ensure_non_production() -> None:
    """Abort destructive options when running in production."""
    app_env = str(current_app.config.get("APP_ENV", "")).lower()
    if app_env == "production":
        raise click.UsageError("'flask init-db --drop' is restricted to non-production environments.")


@click.command("init-db")
@click.option("--drop", is_flag=True, help="Drop all tables before creating them.")
@with_appcontext
def init_db_command(drop: bool) -> None:
    """Create every table known to the models (no-op for existing tables)."""
    if drop:
        _ensure_non_production()
        db.drop_all()
        LOGGER.warning("cli.init_db.dropped")
    db.create_all()
    click.echo("Database tables created.")
