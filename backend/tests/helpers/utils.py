"""Tiny helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised.

    Parameters
    ----------
    exception: type[BaseException]
        Exception type that should not be raised within the context.

    Yields
    ------
    None
        Control enters the managed block when the exception is absent.
    """
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc


DEFAULT_PASSWORD = "SecurePass123!"
ETH_ADDRESS = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"
BTC_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"


def bearer(token: str) -> dict[str, str]:
    """Build an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}
