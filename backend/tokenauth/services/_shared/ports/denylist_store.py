from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol


class TokenDenylistStore(Protocol):
    """
    Abstraction for a denylist store for **access tokens**.

    Methods are expected to be idempotent and safe to call from several
    threads at once.
    """

    def is_revoked(self, jti: str) -> bool: ...
    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None: ...
    def prune(self, now: datetime | None = None) -> int: ...


class InMemoryDenylistStore(TokenDenylistStore):
    """
    Process-local denylist for **access** tokens by JTI.

    Entries stay revoked until pruned, even past their expiry. ``revoke_jti``
    prunes opportunistically, at most once per ``prune_interval``.
    """

    def __init__(
        self,
        *,
        prune_interval: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._prune_interval = prune_interval
        self._last_prune = self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._revoked)

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            return jti in self._revoked

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        now = self._clock()
        with self._lock:
            self._revoked[jti] = expires_at
            if now - self._last_prune >= self._prune_interval:
                self._prune_locked(now)

    def prune(self, now: datetime | None = None) -> int:
        """
        Drop entries whose expiry has passed.

        :param now: Reference instant; defaults to the store clock.
        :returns: Number of entries removed.
        """
        with self._lock:
            return self._prune_locked(now or self._clock())

    def _prune_locked(self, now: datetime) -> int:
        expired = [jti for jti, exp in self._revoked.items() if exp <= now]
        for jti in expired:
            del self._revoked[jti]
        self._last_prune = now
        return len(expired)
