from __future__ import annotations

import threading
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tokenauth.models.refresh_token import RefreshToken
    from tokenauth.models.user import User


class RefreshTokenStore(Protocol):
    """
    Persistence port for refresh-token records.

    Implementations never commit; the surrounding unit of work owns the
    transaction. ``delete`` reports the rows it removed so that callers can
    detect a concurrent consumer (compare-and-delete).
    """

    def save(self, token: RefreshToken) -> RefreshToken:
        """Persist a new record and return it."""
        ...

    def find_by_value(self, value: str, *, for_update: bool = False) -> RefreshToken | None:
        """Look up a record by its opaque value, optionally locking the row."""
        ...

    def delete_by_user(self, user: User) -> int:
        """Delete every record owned by ``user``. :returns: Rows removed."""
        ...

    def delete(self, token: RefreshToken) -> int:
        """Delete exactly this record. :returns: ``1`` if it was still present, else ``0``."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete records whose expiry lies before ``now``. :returns: Rows removed."""
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store holding transient model instances.

    .. note::
       ``lock`` is re-entrant and shared with
       :class:`~tokenauth.uow.memory_uow.InMemoryUnitOfWork`, which holds it for
       the whole unit of work so that rotations are serialized.
    """

    def __init__(self) -> None:
        self._by_value: dict[str, RefreshToken] = {}
        self._seq = 0
        self.lock = threading.RLock()

    def __len__(self) -> int:
        with self.lock:
            return len(self._by_value)

    def all(self) -> list[RefreshToken]:
        with self.lock:
            return list(self._by_value.values())

    def save(self, token: RefreshToken) -> RefreshToken:
        with self.lock:
            if token.id is None:
                self._seq += 1
                token.id = self._seq
            self._by_value[token.token] = token
            return token

    def find_by_value(self, value: str, *, for_update: bool = False) -> RefreshToken | None:
        with self.lock:
            return self._by_value.get(value)

    def delete_by_user(self, user: User) -> int:
        with self.lock:
            owned = [v for v, t in self._by_value.items() if t.user_id == user.id]
            for value in owned:
                del self._by_value[value]
            return len(owned)

    def delete(self, token: RefreshToken) -> int:
        with self.lock:
            current = self._by_value.get(token.token)
            if current is None or current.id != token.id:
                return 0
            del self._by_value[token.token]
            return 1

    def delete_expired(self, now: datetime) -> int:
        with self.lock:
            expired = [v for v, t in self._by_value.items() if t.expires_at < now]
            for value in expired:
                del self._by_value[value]
            return len(expired)
