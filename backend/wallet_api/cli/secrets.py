"""Flask CLI commands for generating token signing secrets."""

from __future__ import annotations

import secrets

import click

SECRET_BYTES = 64
SECRET_NAMES = ("JWT_SECRET", "JWT_REFRESH_SECRET")


def generate_secret(nbytes: int = SECRET_BYTES) -> str:
    """Return ``nbytes`` of CSPRNG output as hex."""
    return secrets.token_hex(nbytes)


@click.group("secrets")
def secrets_cli() -> None:
    """Collection of secret management commands."""


@secrets_cli.command("generate")
@click.option(
    "--bytes",
    "nbytes",
    type=click.IntRange(min=32),
    default=SECRET_BYTES,
    show_default=True,
    help="Random bytes per secret.",
)
def generate(nbytes: int) -> None:
    """Print fresh, distinct values for the access and refresh secrets."""
    for name in SECRET_NAMES:
        click.echo(f"{name}={generate_secret(nbytes)}")
