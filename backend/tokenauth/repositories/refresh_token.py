"""Refresh token repository: SQLAlchemy implementation of the refresh store."""

from __future__ import annotations

from datetime import datetime

from tokenauth.models.refresh_token import RefreshToken
from tokenauth.models.user import User
from tokenauth.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    ``delete`` issues ``DELETE ... WHERE id = :id AND token = :token`` and
    reports the affected row count, which is the compare-and-delete primitive
    used by rotation: a count of ``0`` means a concurrent transaction consumed
    the token first. The opaque value is part of the match because SQLite
    hands a freed rowid to the next insert and ignores ``FOR UPDATE``.
    """

    model = RefreshToken

    def _filterable_fields(self):
        return {"token": RefreshToken.token, "user_id": RefreshToken.user_id}

    def save(self, token: RefreshToken) -> RefreshToken:
        return self.add(token)

    def find_by_value(self, value: str, *, for_update: bool = False) -> RefreshToken | None:
        """Look up a token by its opaque value.

        :param value: Value presented by the client.
        :param for_update: Lock the row until the transaction ends.
        :returns: Matching record or ``None``.
        """
        return self.find_one(for_update=for_update, token=value)

    def delete_by_user(self, user: User) -> int:
        return self.delete_where(RefreshToken.user_id == user.id)

    def delete(self, token: RefreshToken) -> int:
        return self.delete_where(RefreshToken.id == token.id, RefreshToken.token == token.token)

    def delete_expired(self, now: datetime) -> int:
        """Remove every token whose expiry lies before ``now``."""
        return self.delete_where(RefreshToken.expires_at < now)
