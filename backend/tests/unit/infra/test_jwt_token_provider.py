"""Unit tests for the flask-jwt-extended token adapter."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import pytest
from flask_jwt_extended import create_refresh_token
from freezegun import freeze_time

from tokenauth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from tokenauth.services._shared.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
)
from tokenauth.services._shared.ports import FACTOR_PASSWORD


@pytest.fixture()
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_mint_verify_round_trip(provider):
    token = provider.mint("a@x.com", {"USER", "ADMIN", FACTOR_PASSWORD}, timedelta(minutes=5))

    claims = provider.verify(token)

    assert claims["sub"] == "a@x.com"
    assert claims["authorities"] == ["ADMIN", "USER"]
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 300


def test_each_token_gets_a_distinct_jti(provider):
    first = provider.verify(provider.mint("a@x.com", ["USER"], timedelta(minutes=5)))
    second = provider.verify(provider.mint("a@x.com", ["USER"], timedelta(minutes=5)))

    assert first["jti"] != second["jti"]


def test_duplicate_authorities_collapse(provider):
    token = provider.mint("a@x.com", ["USER", "USER"], timedelta(minutes=5))

    assert provider.verify(token)["authorities"] == ["USER"]


def test_expired_token_raises_token_expired(provider):
    with freeze_time("2030-01-01 12:00:00"):
        token = provider.mint("a@x.com", ["USER"], timedelta(minutes=1))
    with freeze_time("2030-01-01 12:02:00"), pytest.raises(TokenExpiredError):
        provider.verify(token)


def test_token_signed_with_another_key_is_rejected(provider):
    now = datetime.now(UTC)
    forged = pyjwt.encode(
        {
            "sub": "a@x.com",
            "jti": "forged",
            "type": "access",
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(minutes=5),
        },
        "some-other-secret-key-of-decent-length",
        algorithm="HS256",
    )

    with pytest.raises(InvalidSignatureError):
        provider.verify(forged)


@pytest.mark.parametrize("garbage", ["garbage", "a.b.c", ""])
def test_garbage_is_malformed(provider, garbage):
    with pytest.raises(MalformedTokenError):
        provider.verify(garbage)


def test_refresh_type_jwt_is_not_an_access_token(provider):
    token = create_refresh_token(identity="a@x.com")

    with pytest.raises(MalformedTokenError):
        provider.verify(token)


def test_all_failures_share_token_error_base():
    for exc_type in (InvalidSignatureError, TokenExpiredError, MalformedTokenError):
        assert issubclass(exc_type, TokenError)
