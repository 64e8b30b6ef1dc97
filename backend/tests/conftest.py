"""Pytest fixtures building an isolated application per test.

Each test gets a fresh Flask app on its own in-memory SQLite database and a
private ``fakeredis`` server, so neither rows nor revocation records leak
between cases.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from wallet_api.core.auth import get_auth_components
from wallet_api.core.config import TestingConfig
from wallet_api.core.extensions import db as _db  # Flask-SQLAlchemy instance
from wallet_api.factory import create_app  # application factory under test

from tests.helpers.utils import DEFAULT_PASSWORD, bearer


@pytest.fixture()
def fake_redis():
    """Provide a FakeRedis client bound to a private in-memory server."""
    r = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    try:
        yield r
    finally:
        r.flushall()


@pytest.fixture()
def app(fake_redis):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig`, ``fakeredis`` as
        the revocation store backend and all tables created.

    Notes
    -----
    The app context is only pushed around setup/teardown. Requests issued by
    the test client push their own context, exactly as in production.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, redis_client=fake_redis)
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def auth_components(app):
    """Return the auth collaborators wired by the factory."""
    return get_auth_components(app)


@pytest.fixture()
def session(app):
    """Push an app context and expose the Flask-SQLAlchemy session.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        The same session the services and repositories use, also registered
        for Factory Boy.
    """
    from tests.factories import SQLAlchemySession

    with app.app_context():
        SQLAlchemySession.set(_db.session)
        try:
            yield _db.session
        finally:
            SQLAlchemySession.set(None)
            _db.session.remove()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- HTTP helpers ---------------------------------------------------------------


@pytest.fixture()
def signup(client):
    """Return a helper that registers a user over HTTP and returns ``data``."""

    def _signup(email: str = "a@b.com", password: str = DEFAULT_PASSWORD) -> dict:
        resp = client.post("/api/auth/signup", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _signup


@pytest.fixture()
def auth_headers(signup):
    """Register a default user and return its bearer header."""
    data = signup()
    return bearer(data["token"])
