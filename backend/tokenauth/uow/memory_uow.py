"""
In-memory UnitOfWork used by unit tests and the service layer's test doubles.
"""

from __future__ import annotations

from tokenauth.services._shared.ports import InMemoryRefreshTokenStore, InMemoryUserDirectory
from tokenauth.uow.base import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work over in-memory stores.

    The refresh store lock is held from ``__enter__`` to ``__exit__`` so that
    every unit of work is serialized against the others sharing the store.
    Changes apply immediately; ``rollback`` only records that it happened.
    """

    def __init__(
        self,
        *,
        users: InMemoryUserDirectory,
        refresh_tokens: InMemoryRefreshTokenStore,
    ) -> None:
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.committed = False
        self.rolled_back = False

    def __enter__(self) -> InMemoryUnitOfWork:
        self.refresh_tokens.lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.refresh_tokens.lock.release()

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True
