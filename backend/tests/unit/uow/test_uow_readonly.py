import pytest
from sqlalchemy.orm import scoped_session
from wallet_api.models.user import User
from wallet_api.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from wallet_api.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)

from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_allows_reads(self, session):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() == 1

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit() by design.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
            user_id = user.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            original_email = u.email
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            persisted = uow.session.get(User, user_id)
            assert persisted.email == original_email

    def test_guard_is_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())
        assert session.query(User).count() == 1

    def test_unknown_isolation_level_is_ignored_on_sqlite(self, session):
        """Directives only run on dialects that support them."""
        with ROuow(isolation_level="NOT A LEVEL") as uow:
            assert uow.session.query(User).count() == 0

    def test_default_session_is_the_flask_scoped_session(self, session):
        """The scoped proxy is resolved before inspecting transaction state."""
        uow = ROuow()
        assert isinstance(uow.session, scoped_session)
        with uow:
            assert uow.session.query(User).count() == 0

    def test_joins_a_transaction_already_in_progress(self, session):
        session.query(User).count()
        assert session().in_transaction()

        with ROuow() as uow:
            assert uow.session.query(User).count() == 0

    def test_accepts_a_plain_session(self, session):
        plain = session()
        with ROuow(plain) as uow:
            assert uow.users.list() == []
