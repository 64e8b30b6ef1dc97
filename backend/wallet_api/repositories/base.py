"""Generic SQLAlchemy 2.x repository and the paging types it returns.

Repositories are persistence-only: they build and run statements on the
session they are given and never commit or roll back. Sorting, filtering and
updates all go through per-repository whitelists, so public input never names
a column directly.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, literal, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from wallet_api.core.extensions import db

E = TypeVar("E")

Column = InstrumentedAttribute[Any]


@dataclass(slots=True)
class Pagination:
    """
    Page request.

    :param page: 1-based page number.
    :param limit: Rows per page.
    :param sort: Sort tokens; a leading ``-`` means descending
        (``["-created_at", "chain"]``).
    """

    page: int
    limit: int
    sort: list[str] = field(default_factory=list)

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.limit, 1)


@dataclass(slots=True)
class Page(Generic[E]):
    """One page of results plus the size of the whole result set."""

    items: Sequence[E]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Turn ``["-created_at", "tag"]`` into ``[("created_at", True), ("tag", False)]``."""
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        name = token.lstrip("-").strip()
        if name:
            parsed.append((name, token.startswith("-")))
    return parsed


class BaseRepository(Generic[E]):
    """
    CRUD and listing for one mapped model.

    Subclasses set ``model`` and may override the three whitelist hooks:
    ``_sortable_fields``, ``_filterable_fields`` and ``_updatable_fields``.
    Unknown sort or filter keys are ignored; unknown update keys raise.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, else the Flask-scoped one."""
        return self._session if self._session is not None else cast(Session, db.session)

    # -- whitelist hooks -------------------------------------------------------

    def _sortable_fields(self) -> Mapping[str, Column]:
        return {}

    def _filterable_fields(self) -> Mapping[str, Column]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _pk(self) -> Column:
        return cast(Column, self.model.id)  # type: ignore[attr-defined]

    # -- statement helpers -----------------------------------------------------

    def _apply_equality_filters(
        self, stmt: Select[Any], filters: Mapping[str, Any] | None
    ) -> Select[Any]:
        """Add ``column == value`` for whitelisted keys; ``None`` values are skipped."""
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            column = allowed.get(key)
            if column is not None and value is not None:
                stmt = stmt.where(column == value)
        return stmt

    def _apply_sorting(self, stmt: Select[Any], tokens: Iterable[str]) -> Select[Any]:
        """Order by whitelisted tokens, then by primary key so pages are stable."""
        columns = self._sortable_fields()
        for name, descending in parse_sort_tokens(tokens):
            column = columns.get(name)
            if column is not None:
                stmt = stmt.order_by(column.desc() if descending else column.asc())
        return stmt.order_by(self._pk().asc())

    def _paginate_statement(self, stmt: Select[Any], pagination: Pagination) -> Page[E]:
        """
        Sort ``stmt``, count its rows and fetch the requested slice.

        The count runs on the unordered statement.
        """
        limit = max(int(pagination.limit), 1)
        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        ordered = self._apply_sorting(stmt, pagination.sort)
        rows = self.session.execute(ordered.limit(limit).offset(pagination.offset)).scalars()
        return Page(items=list(rows), total=int(total), page=pagination.page, limit=limit)

    # -- CRUD ------------------------------------------------------------------

    def flush(self) -> None:
        self.session.flush()

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush, so defaults and constraints apply now."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        return cast(E | None, self.session.get(self.model, entity_id))

    def find_one(self, **filters: Any) -> E | None:
        stmt = self._apply_equality_filters(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt.limit(1)).scalars().first())

    def exists(self, **filters: Any) -> bool:
        stmt = self._apply_equality_filters(select(literal(1)).select_from(self.model), filters)
        return self.session.execute(stmt.limit(1)).first() is not None

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted attributes and flush.

        Assignment goes through ``setattr`` so model ``@validates`` hooks run.

        :raises ValueError: If a key is not in ``_updatable_fields``.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    # -- listing ---------------------------------------------------------------

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
    ) -> list[E]:
        stmt = self._apply_equality_filters(select(self.model), filters)
        stmt = self._apply_sorting(stmt, sort or ())
        return list(self.session.execute(stmt).scalars())

    def paginate(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[E]:
        """Return one page of rows matching ``filters``."""
        stmt = self._apply_equality_filters(select(self.model), filters)
        return self._paginate_statement(stmt, pagination)
