# tokenauth/services/sessions/service.py
from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from tokenauth.models.refresh_token import RefreshToken
from tokenauth.models.user import User
from tokenauth.services._shared.base import BaseService, Clock, UnitOfWorkFactory
from tokenauth.services._shared.errors import InvalidRefreshTokenError
from tokenauth.services.sessions.dto import RefreshTokenOut
from tokenauth.uow.base import UnitOfWork

DEFAULT_REFRESH_TTL = timedelta(days=7)

# 32 random bytes, ~43 URL-safe characters
REFRESH_TOKEN_BYTES = 32


class SessionManager(BaseService):
    """
    Refresh-token lifecycle: issue, rotate and invalidate.

    Invariants
    ----------
    - A user holds at most one live refresh token: issuing deletes the
      previous ones in the same unit of work.
    - A refresh token is single-use: rotation consumes the presented row with
      a compare-and-delete, so of two concurrent rotations exactly one wins.
    """

    def __init__(
        self,
        *,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param refresh_ttl: Lifetime of each issued refresh token.
        :param uow_factory: Unit of Work factory (SQLAlchemy by default).
        :param clock: Callable returning the current aware UTC instant.
        """
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.refresh_ttl = refresh_ttl

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def create(self, user: User) -> RefreshTokenOut:
        """
        Replace every refresh token of ``user`` with a new one.

        :param user: Owner of the new token.
        :returns: The issued token.
        """
        with self.rw_uow() as uow:
            issued = self._issue(uow, user)
        self.log.info("session.create user_id=%s", issued.user_id)
        return issued

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, value: str) -> RefreshTokenOut:
        """
        Consume ``value`` and issue a replacement for its owner.

        An expired token is deleted and the deletion is committed before the
        error is raised, so presenting it again reports "not found".

        :param value: Refresh token presented by the client.
        :returns: The replacement token.
        :raises InvalidRefreshTokenError: Unknown, already used or expired token.
        """
        now = self.now_utc()
        expired_user_id: int | None = None

        with self.rw_uow() as uow:
            token = uow.refresh_tokens.find_by_value(value, for_update=True)
            if token is None:
                raise InvalidRefreshTokenError(InvalidRefreshTokenError.NOT_FOUND)

            if token.is_expired(now):
                expired_user_id = token.user_id
                uow.refresh_tokens.delete(token)
            else:
                # Load the owner before the row disappears from the session
                owner = token.user
                if uow.refresh_tokens.delete(token) == 0:
                    # Lost the race against a concurrent rotation
                    raise InvalidRefreshTokenError(InvalidRefreshTokenError.NOT_FOUND)
                issued = self._issue(uow, owner)

        if expired_user_id is not None:
            self.log.info("session.rotate.expired user_id=%s", expired_user_id)
            raise InvalidRefreshTokenError(InvalidRefreshTokenError.EXPIRED)

        self.log.info("session.rotate user_id=%s", issued.user_id)
        return issued

    # ------------------------------------------------------------------ #
    # Invalidate / housekeeping
    # ------------------------------------------------------------------ #

    def invalidate(self, user: User) -> int:
        """
        Delete every refresh token of ``user``.

        :returns: Number of tokens removed.
        """
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_by_user(user)
        self.log.info("session.invalidate user_id=%s removed=%s", user.id, removed)
        return removed

    def purge_expired(self, now: datetime | None = None) -> int:
        """
        Delete refresh tokens that expired before ``now``.

        :returns: Number of tokens removed.
        """
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_expired(now or self.now_utc())
        self.log.info("session.purge_expired removed=%s", removed)
        return removed

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue(self, uow: UnitOfWork, user: User) -> RefreshTokenOut:
        uow.refresh_tokens.delete_by_user(user)
        now = self.now_utc()
        token = RefreshToken(
            token=secrets.token_urlsafe(REFRESH_TOKEN_BYTES),
            user=user,
            user_id=user.id,
            expires_at=now + self.refresh_ttl,
            created_at=now,
        )
        uow.refresh_tokens.save(token)
        return RefreshTokenOut.from_model(token)
