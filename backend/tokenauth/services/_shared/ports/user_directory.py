from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.exc import IntegrityError

if TYPE_CHECKING:
    from tokenauth.models.user import User


class UserDirectory(Protocol):
    """Port for credential lookup and role data."""

    def add(self, instance: User) -> User: ...
    def get(self, entity_id: int) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def exists_by_email(self, email: str) -> bool: ...


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed user directory for unit tests."""

    def __init__(self) -> None:
        self._by_email: dict[str, User] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def add(self, instance: User) -> User:
        with self._lock:
            if instance.email in self._by_email:
                # Same failure shape as the unique index on users.email
                raise IntegrityError(
                    "INSERT INTO users",
                    {"email": instance.email},
                    Exception("UNIQUE constraint failed: users.email"),
                )
            self._seq += 1
            instance.id = self._seq
            self._by_email[instance.email] = instance
            return instance

    def get(self, entity_id: int) -> User | None:
        with self._lock:
            return next((u for u in self._by_email.values() if u.id == entity_id), None)

    def get_by_email(self, email: str) -> User | None:
        with self._lock:
            return self._by_email.get(email.lower().strip())

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None
