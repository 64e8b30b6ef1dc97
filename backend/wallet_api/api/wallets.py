"""Wallet endpoints; every route is scoped to the authenticated user."""

from __future__ import annotations

from flask import Blueprint, request

from wallet_api.api.deps import (
    current_auth,
    load_json_body,
    require_auth,
    success_response,
    timing,
)
from wallet_api.schemas import (
    WalletCreateSchema,
    WalletQuerySchema,
    WalletSchema,
    WalletUpdateSchema,
    build_pagination,
)
from wallet_api.services.wallets import WalletService

bp = Blueprint("wallets", __name__)

wallet_schema = WalletSchema()
wallet_list_schema = WalletSchema(many=True)
wallet_create_schema = WalletCreateSchema()
wallet_update_schema = WalletUpdateSchema()
wallet_query_schema = WalletQuerySchema()


@bp.get("")
@require_auth
@timing
def list_wallets():
    """Return the caller's wallets, paginated and filtered."""

    query = wallet_query_schema.load(request.args.to_dict())
    result = WalletService().list_wallets_page(current_auth().subject_id, query)
    return success_response(
        wallet_list_schema.dump(result.items),
        message="Wallets retrieved successfully",
        pagination=build_pagination(result.meta),
    )


@bp.get("/<string:wallet_id>")
@require_auth
@timing
def get_wallet(wallet_id: str):
    wallet = WalletService().get_wallet(current_auth().subject_id, wallet_id)
    return success_response(wallet_schema.dump(wallet), message="Wallet retrieved successfully")


@bp.post("")
@require_auth
@timing
def create_wallet():
    """Register a wallet address for the caller."""

    dto = wallet_create_schema.load(load_json_body())
    wallet = WalletService().create_wallet(current_auth().subject_id, dto)
    return success_response(
        wallet_schema.dump(wallet), message="Wallet created successfully", status=201
    )


@bp.put("/<string:wallet_id>")
@require_auth
@timing
def update_wallet(wallet_id: str):
    """Apply a partial update to one of the caller's wallets."""

    dto = wallet_update_schema.load(load_json_body())
    wallet = WalletService().update_wallet(current_auth().subject_id, wallet_id, dto)
    return success_response(wallet_schema.dump(wallet), message="Wallet updated successfully")


@bp.delete("/<string:wallet_id>")
@require_auth
@timing
def delete_wallet(wallet_id: str):
    WalletService().delete_wallet(current_auth().subject_id, wallet_id)
    return success_response(message="Wallet deleted successfully")
