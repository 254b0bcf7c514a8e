# tokenauth/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended.exceptions import JWTExtendedException

from tokenauth.services._shared.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from tokenauth.services._shared.ports.token_provider import (
    AUTHORITIES_CLAIM,
    TokenProvider,
    filter_authorities,
)

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ("sub", "jti", "exp")


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    .. note::
       Requires an active Flask app context: the signing key and algorithm
       come from ``JWT_SECRET_KEY`` / ``JWT_ALGORITHM``.
    """

    def mint(self, subject: str, authorities: Iterable[str], ttl: timedelta) -> str:
        # Flask-JWT-Extended adds iat, nbf, exp, a fresh uuid4 jti and type=access
        from flask_jwt_extended import create_access_token

        return cast(
            str,
            create_access_token(
                identity=subject,
                additional_claims={AUTHORITIES_CLAIM: filter_authorities(authorities)},
                expires_delta=ttl,
            ),
        )

    def verify(self, token: str) -> dict[str, Any]:
        from flask_jwt_extended import decode_token

        try:
            claims = cast(dict[str, Any], decode_token(token))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except pyjwt.InvalidSignatureError as exc:
            raise InvalidSignatureError("Signature verification failed") from exc
        except (pyjwt.InvalidTokenError, JWTExtendedException) as exc:
            raise MalformedTokenError(str(exc) or "Malformed token") from exc

        if claims.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
            raise MalformedTokenError("Access token required")
        missing = [name for name in REQUIRED_CLAIMS if not claims.get(name)]
        if missing:
            raise MalformedTokenError(f"Missing claims: {', '.join(missing)}")
        return claims
