"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from wallet_api.services.auth.dto import RefreshIn, SignInIn, SignUpIn

EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


class SignUpSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(
        required=True,
        validate=validate.Length(max=EMAIL_MAX_LENGTH),
        error_messages={"invalid": "Invalid email format"},
    )
    password = fields.String(
        required=True,
        validate=validate.Length(
            min=PASSWORD_MIN_LENGTH,
            max=PASSWORD_MAX_LENGTH,
            error="Password must be between {min} and {max} characters long",
        ),
    )

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> SignUpIn:
        return SignUpIn(email=data["email"], password=data["password"])


class SignInSchema(Schema):
    """
    Input payload for authenticating a user.

    Only presence is checked on the password; any wrong value, short or not,
    must be answered with the same 401.
    """

    email = fields.Email(
        required=True,
        validate=validate.Length(max=EMAIL_MAX_LENGTH),
        error_messages={"invalid": "Invalid email format"},
    )
    password = fields.String(
        required=True, validate=validate.Length(min=1, max=PASSWORD_MAX_LENGTH)
    )

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> SignInIn:
        return SignInIn(email=data["email"], password=data["password"])


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token."""

    refresh_token = fields.String(
        data_key="refreshToken", required=True, validate=validate.Length(min=1)
    )

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> RefreshIn:
        return RefreshIn(refresh_token=data["refresh_token"])


class UserSchema(Schema):
    """Public user representation."""

    id = fields.String(required=True)
    email = fields.String(required=True)


class AuthResultSchema(Schema):
    """``data`` block of sign-up and sign-in responses."""

    user = fields.Nested(UserSchema, required=True)
    token = fields.String(attribute="tokens.access_token")
    refresh_token = fields.String(data_key="refreshToken", attribute="tokens.refresh_token")


class TokenPairSchema(Schema):
    """``data`` block of refresh responses."""

    token = fields.String(attribute="access_token")
    refresh_token = fields.String(data_key="refreshToken")
