"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app

from wallet_api.api.deps import (
    current_auth,
    get_auth_service,
    load_json_body,
    require_auth,
    success_response,
    timing,
)
from wallet_api.core.extensions import limiter
from wallet_api.schemas import (
    AuthResultSchema,
    RefreshSchema,
    SignInSchema,
    SignUpSchema,
    TokenPairSchema,
)
from wallet_api.services.auth import SignOutIn

bp = Blueprint("auth", __name__)

signup_schema = SignUpSchema()
signin_schema = SignInSchema()
refresh_schema = RefreshSchema()
auth_result_schema = AuthResultSchema()
token_pair_schema = TokenPairSchema()


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_RATE_LIMIT", "5 per 15 minutes"))


@bp.post("/signup")
@limiter.limit(_auth_rate_limit)
@timing
def signup():
    """Register a new user and open a first session."""

    dto = signup_schema.load(load_json_body())
    result = get_auth_service().sign_up(dto)
    return success_response(
        auth_result_schema.dump(result), message="User registered successfully", status=201
    )


@bp.post("/signin")
@limiter.limit(_auth_rate_limit)
@timing
def signin():
    """Authenticate credentials and issue a fresh token pair."""

    dto = signin_schema.load(load_json_body())
    result = get_auth_service().sign_in(dto)
    return success_response(auth_result_schema.dump(result), message="Sign in successful")


@bp.post("/refresh")
@limiter.limit(_auth_rate_limit)
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""

    dto = refresh_schema.load(load_json_body())
    pair = get_auth_service().refresh(dto)
    return success_response(token_pair_schema.dump(pair), message="Token refreshed successfully")


@bp.post("/signout")
@require_auth
@timing
def signout():
    """Revoke the presented access token and every refresh session."""

    auth = current_auth()
    get_auth_service().sign_out(SignOutIn(subject_id=auth.subject_id, access_token=auth.token))
    return success_response(message="Sign out successful")
