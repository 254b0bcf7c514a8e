"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed unit of work used by the
application, the in-memory variant used by unit tests, and the abstract
contract that service layers depend on.
"""

from .base import UnitOfWork
from .memory_uow import InMemoryUnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "InMemoryUnitOfWork",
    "SQLAlchemyUnitOfWork",
]
