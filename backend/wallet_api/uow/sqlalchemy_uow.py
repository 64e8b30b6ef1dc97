"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from wallet_api.core.extensions import db
from wallet_api.repositories import UserRepository, WalletRepository
from wallet_api.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session | scoped_session[Any]) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.wallets = WalletRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent
    transaction. Leaving the block commits; an exception rolls back.
    """

    def __init__(self, session: Session | scoped_session[Any] | None = None) -> None:
        super().__init__(session=session if session is not None else db.session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Blocks ORM flushes of new, dirty or deleted objects.
    - Applies ``SET TRANSACTION READ ONLY`` (and an optional isolation level)
      on PostgreSQL and MySQL when it opens the transaction itself.
    - Always rolls back on exit and disallows ``commit()``.

    Parameters
    ----------
    isolation_level:
        Optional transaction isolation level hint such as ``"READ COMMITTED"``.
    enforce_db_readonly:
        If ``True`` (default), applies ``SET TRANSACTION READ ONLY`` when supported.
    """

    _DIRECTIVE_DIALECTS = ("postgresql", "mysql", "mariadb")
    _ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED")

    def __init__(
        self,
        session: Session | scoped_session[Any] | None = None,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session if session is not None else db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._guarded: Session | None = None

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        target = self._target_session()
        owns_transaction = not target.in_transaction()
        self._install_guard(target)
        if owns_transaction:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.session.rollback()
        finally:
            self._remove_guard()

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Internals ----------------------------------

    def _apply_directives(self) -> None:
        """Issue ``SET TRANSACTION`` statements where the dialect supports them."""
        dialect = self.session.get_bind().dialect.name
        if dialect not in self._DIRECTIVE_DIALECTS:
            return
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in self._ISOLATION_LEVELS:
                    raise ValueError(f"Unknown isolation level {iso!r}")
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("uow.readonly_directives_failed: %s", exc)

    def _target_session(self) -> Session:
        """Return the concrete session behind a ``scoped_session`` proxy."""
        if isinstance(self.session, scoped_session):
            return self.session()
        return self.session

    def _install_guard(self, target: Session) -> None:
        """Reject flushes that would emit DML."""
        event.listen(target, "before_flush", _block_flush)
        self._guarded = target

    def _remove_guard(self) -> None:
        if self._guarded is None:
            return
        if event.contains(self._guarded, "before_flush", _block_flush):
            event.remove(self._guarded, "before_flush", _block_flush)
        self._guarded = None


def _block_flush(session: Session, flush_context: Any, instances: Any) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )
