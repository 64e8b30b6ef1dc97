"""Tests for the Wallet model."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from wallet_api.models.wallet import Wallet

from tests.factories.user import UserFactory
from tests.helpers.utils import ETH_ADDRESS


class TestWallet:
    def test_timestamps_are_set(self, session):
        owner = UserFactory()
        w = Wallet(user_id=owner.id, chain="Ethereum", address=ETH_ADDRESS)
        session.add(w)
        session.commit()

        assert isinstance(w.created_at, datetime)
        assert isinstance(w.updated_at, datetime)
        assert w.tag is None

    def test_updated_at_moves_on_update(self, session):
        owner = UserFactory()
        w = Wallet(user_id=owner.id, chain="Ethereum", address=ETH_ADDRESS, tag="a")
        session.add(w)
        session.commit()
        created, first_update = w.created_at, w.updated_at

        w.tag = "b"
        session.commit()
        assert w.created_at == created
        assert w.updated_at > first_update

    def test_address_unique_across_users(self, session):
        a, b = UserFactory(), UserFactory()
        session.add(Wallet(user_id=a.id, chain="Ethereum", address=ETH_ADDRESS))
        session.commit()

        session.add(Wallet(user_id=b.id, chain="Polygon", address=ETH_ADDRESS))
        with pytest.raises(IntegrityError) as excinfo:
            session.commit()
        session.rollback()
        assert "wallets.address" in str(excinfo.value.orig)

    def test_wallet_requires_owner(self, session):
        session.add(Wallet(chain="Ethereum", address=ETH_ADDRESS))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_timestamps_are_utc_aware_after_reload(self, session):
        owner = UserFactory()
        w = Wallet(user_id=owner.id, chain="Ethereum", address=ETH_ADDRESS)
        session.add(w)
        session.commit()
        session.expire_all()

        reloaded = session.get(Wallet, w.id)
        assert reloaded.created_at.utcoffset() == timedelta(0)
        assert reloaded.updated_at.utcoffset() == timedelta(0)
