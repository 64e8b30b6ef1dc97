"""Factory Boy definition for :class:`wallet_api.models.user.User`."""

from __future__ import annotations

import factory
from wallet_api.core.config import TestingConfig
from wallet_api.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from wallet_api.models.user import User

from tests.factories import BaseFactory

# Same cost as TestingConfig so hashes verify fast.
TEST_HASHER = WerkzeugPasswordHasher(cost=TestingConfig.PASSWORD_HASH_COST)


class UserFactory(BaseFactory):
    """
    Build persisted :class:`wallet_api.models.user.User` instances.

    Notes
    -----
    Pass ``password="..."`` to choose the plaintext; only its hash reaches
    the model.
    """

    class Meta:
        model = User

    class Params:
        password = "SecurePass123!"

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password_hash = factory.LazyAttribute(lambda o: TEST_HASHER.hash(o.password))
