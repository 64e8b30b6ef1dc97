"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .db import init_db_command
from .secrets import secrets_cli


def init_app(app: Flask) -> None:
    """Register application-specific CLI commands.

    Parameters
    ----------
    app:
        Flask application instance whose CLI registry will receive the
        ``init-db`` command and the ``secrets`` group.
    """
    app.cli.add_command(init_db_command)
    app.cli.add_command(secrets_cli)


__all__ = ["init_app", "init_db_command", "secrets_cli"]
