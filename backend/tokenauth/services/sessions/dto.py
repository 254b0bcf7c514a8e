# tokenauth/services/sessions/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tokenauth.models.refresh_token import RefreshToken


@dataclass(frozen=True, slots=True)
class RefreshTokenOut:
    """
    Output DTO describing an issued refresh token.

    :param value: Opaque value handed to the client.
    :type value: str
    :param user_id: Owner identifier.
    :type user_id: int
    :param subject: Owner identity (email) for the next access token.
    :type subject: str
    :param authorities: Owner role names at issue time.
    :type authorities: frozenset[str]
    :param expires_at: Absolute UTC expiry.
    :type expires_at: datetime
    :param created_at: Issue instant.
    :type created_at: datetime
    """

    value: str
    user_id: int
    subject: str
    authorities: frozenset[str]
    expires_at: datetime
    created_at: datetime

    @classmethod
    def from_model(cls, token: RefreshToken) -> RefreshTokenOut:
        return cls(
            value=token.token,
            user_id=token.user.id,
            subject=token.user.email,
            authorities=frozenset(token.user.authorities),
            expires_at=token.expires_at,
            created_at=token.created_at,
        )
