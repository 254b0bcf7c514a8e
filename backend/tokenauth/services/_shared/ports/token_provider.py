from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol
from uuid import uuid4

from tokenauth.services._shared.errors import MalformedTokenError, TokenExpiredError

# Internal authentication-factor marker; never leaves the process inside a token.
FACTOR_PASSWORD = "FACTOR_PASSWORD"
AUTHORITIES_CLAIM = "authorities"


def filter_authorities(authorities: Iterable[str]) -> list[str]:
    """Return the sorted, de-duplicated authorities minus internal markers."""
    return sorted({a for a in authorities if a and a != FACTOR_PASSWORD})


def expires_at(claims: dict[str, Any]) -> datetime:
    """Convert the ``exp`` claim of decoded token claims into an aware datetime."""
    return datetime.fromtimestamp(int(claims["exp"]), tz=UTC)


class TokenProvider(Protocol):
    """
    Port for minting and verifying signed access tokens.

    Implementations never consult revocation state; callers combine
    :meth:`verify` with a :class:`TokenDenylistStore` when needed.
    """

    def mint(self, subject: str, authorities: Iterable[str], ttl: timedelta) -> str:
        """
        Issue a signed token for ``subject``.

        :param subject: Identity stored in the ``sub`` claim.
        :param authorities: Role names; filtered through :func:`filter_authorities`.
        :param ttl: Lifetime added to the issue instant to compute ``exp``.
        :returns: Encoded token.
        """
        ...

    def verify(self, token: str) -> dict[str, Any]:
        """
        Check signature, structure and expiry and return the claims.

        :raises InvalidSignatureError: Signature does not match.
        :raises TokenExpiredError: ``exp`` is in the past.
        :raises MalformedTokenError: Token cannot be parsed.
        """
        ...


class StubTokenProvider(TokenProvider):
    """Deterministic in-process token provider used in unit tests.

    A token stays valid up to and including the instant of its ``exp`` claim.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def mint(self, subject: str, authorities: Iterable[str], ttl: timedelta) -> str:
        self._seq += 1
        now = self._clock()
        jti = str(uuid4())
        token = f"stub.{self._seq}.{jti}"
        self._issued[token] = {
            "sub": subject,
            "jti": jti,
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            AUTHORITIES_CLAIM: filter_authorities(authorities),
        }
        return token

    def verify(self, token: str) -> dict[str, Any]:
        claims = self._issued.get(token)
        if claims is None:
            raise MalformedTokenError("Unknown token")
        if expires_at(claims) < self._clock():
            raise TokenExpiredError("Token has expired")
        return dict(claims)
