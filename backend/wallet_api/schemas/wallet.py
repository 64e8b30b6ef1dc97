"""Wallet resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, pre_load, validate

from wallet_api.services.wallets.chains import SUPPORTED_CHAINS
from wallet_api.services.wallets.dto import WalletCreateIn, WalletListIn, WalletUpdateIn

TAG_MAX_LENGTH = 100
ADDRESS_MIN_LENGTH = 26
ADDRESS_MAX_LENGTH = 255

# Public ``sortBy`` values mapped to repository sort keys.
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "chain": "chain",
    "tag": "tag",
}


def _tag_field() -> fields.String:
    return fields.String(
        load_default=None,
        allow_none=True,
        validate=[
            validate.Length(min=1, error="Tag must not be empty"),
            validate.Length(max=TAG_MAX_LENGTH),
        ],
    )


def _presence(required: bool) -> dict[str, Any]:
    return {"required": True} if required else {"load_default": None}


def _chain_field(*, required: bool) -> fields.String:
    return fields.String(
        **_presence(required),
        validate=validate.OneOf(SUPPORTED_CHAINS, error="Invalid blockchain chain"),
    )


def _address_field(*, required: bool) -> fields.String:
    return fields.String(
        **_presence(required),
        validate=validate.Length(
            min=ADDRESS_MIN_LENGTH, max=ADDRESS_MAX_LENGTH, error="Invalid wallet address"
        ),
    )


class WalletCreateSchema(Schema):
    """Payload for registering a wallet."""

    tag = _tag_field()
    chain = _chain_field(required=True)
    address = _address_field(required=True)

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> WalletCreateIn:
        return WalletCreateIn(chain=data["chain"], address=data["address"], tag=data.get("tag"))


class WalletUpdateSchema(Schema):
    """Partial update payload; omitted fields are left unchanged."""

    tag = _tag_field()
    chain = _chain_field(required=False)
    address = _address_field(required=False)

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> WalletUpdateIn:
        return WalletUpdateIn(
            chain=data.get("chain"), address=data.get("address"), tag=data.get("tag")
        )


class WalletQuerySchema(Schema):
    """Query parameters accepted by the wallet listing."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))
    sort_by = fields.String(
        data_key="sortBy", load_default="createdAt", validate=validate.OneOf(list(SORT_FIELDS))
    )
    sort_order = fields.String(
        data_key="sortOrder", load_default="DESC", validate=validate.OneOf(["ASC", "DESC"])
    )
    chain = fields.String(load_default=None)
    tag = fields.String(load_default=None)
    search = fields.String(load_default=None)

    @pre_load
    def normalize_order(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data = dict(data)
        if isinstance(data.get("sortOrder"), str):
            data["sortOrder"] = data["sortOrder"].upper()
        return data

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> WalletListIn:
        return WalletListIn(
            page=data["page"],
            limit=data["limit"],
            sort_by=SORT_FIELDS[data["sort_by"]],
            descending=data["sort_order"] == "DESC",
            chain=data["chain"],
            tag=data["tag"],
            search=data["search"],
        )


class WalletSchema(Schema):
    """Representation of the wallet entity."""

    id = fields.String(required=True)
    user_id = fields.String(data_key="userId", required=True)
    tag = fields.String(allow_none=True)
    chain = fields.String(required=True)
    address = fields.String(required=True)
    created_at = fields.DateTime(data_key="createdAt", required=True)
    updated_at = fields.DateTime(data_key="updatedAt", required=True)
