"""Base class for application services."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from wallet_api.repositories.base import Pagination
from wallet_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

UowFactory = Callable[[], SQLAlchemyUnitOfWork]
ReadOnlyUowFactory = Callable[[], SQLAlchemyReadOnlyUnitOfWork]

MAX_PAGE_SIZE = 100


class BaseService:
    """
    Shared plumbing for services: unit-of-work construction and paging.

    Services reach the database only through a unit of work. Both factories
    can be injected; by default they build units of work on the Flask-scoped
    session.

    :param uow_factory: Builds read-write units of work.
    :param ro_uow_factory: Builds read-only units of work.
    """

    read_isolation: str | None = "READ COMMITTED"

    def __init__(
        self,
        *,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: ReadOnlyUowFactory | None = None,
    ) -> None:
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork
        self._ro_uow_factory = ro_uow_factory or self._default_ro_uow

    def _default_ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=self.read_isolation)

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return self._uow_factory()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return self._ro_uow_factory()

    @staticmethod
    def ensure_pagination(
        *, page: int, limit: int, sort: Iterable[str] | None = None, max_limit: int = MAX_PAGE_SIZE
    ) -> Pagination:
        """Clamp ``page`` to ``>= 1`` and ``limit`` to ``1..max_limit``."""
        return Pagination(
            page=max(1, int(page)),
            limit=min(max(1, int(limit)), max_limit),
            sort=list(sort or ()),
        )
