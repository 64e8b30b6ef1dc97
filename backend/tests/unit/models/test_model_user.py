"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from wallet_api.models.user import User
from wallet_api.models.wallet import Wallet

from tests.helpers.utils import ETH_ADDRESS


class TestUser:
    def test_email_stored_exactly_and_unique(self, session):
        u1 = User(email="Alice@Example.com", password_hash="h")
        session.add(u1)
        session.commit()
        assert u1.email == "Alice@Example.com"

        session.add(User(email="Alice@Example.com", password_hash="h"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_emails_differing_in_case_are_distinct(self, session):
        session.add_all(
            [
                User(email="carol@example.com", password_hash="h"),
                User(email="Carol@example.com", password_hash="h"),
            ]
        )
        session.commit()
        assert session.query(User).count() == 2

    @pytest.mark.parametrize("email", ["", "no-at-sign"])
    def test_basic_validations(self, email):
        with pytest.raises(ValueError):
            User(email=email, password_hash="h")

    def test_id_is_uuid_string(self, session):
        u = User(email="d@example.com", password_hash="h")
        session.add(u)
        session.flush()
        assert isinstance(u.id, str) and len(u.id) == 36
        assert repr(u) == f"<User id={u.id}>"
        session.rollback()

    def test_deleting_user_deletes_loaded_wallets(self, session):
        u = User(email="e@example.com", password_hash="h")
        u.wallets.append(Wallet(chain="Ethereum", address=ETH_ADDRESS))
        session.add(u)
        session.commit()

        assert len(u.wallets) == 1
        session.delete(u)
        session.commit()
        assert session.query(Wallet).count() == 0

