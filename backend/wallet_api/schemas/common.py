"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from marshmallow import Schema, fields

from wallet_api.services._shared.dto import PageMeta


class PaginationSchema(Schema):
    """``pagination`` block of list responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total_pages = fields.Integer(data_key="totalPages", required=True)
    has_next = fields.Boolean(data_key="hasNext", required=True)
    has_prev = fields.Boolean(data_key="hasPrev", required=True)


def build_pagination(meta: PageMeta) -> dict[str, int | bool]:
    """Return the public ``pagination`` mapping for ``meta``."""
    return PaginationSchema().dump(meta)
