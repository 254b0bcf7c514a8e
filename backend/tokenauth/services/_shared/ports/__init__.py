"""
tokenauth.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token management and authentication infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: mints and verifies signed access tokens.

- :mod:`denylist_store`:
    Defines :class:`~.TokenDenylistStore`: revocation of access tokens by JTI.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`: persistence of single-use refresh tokens.

- :mod:`user_directory`:
    Defines :class:`~.UserDirectory`: credential lookup and role data.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way password hashing.

Concrete adapters (Redis, SQLAlchemy, flask-jwt-extended, Werkzeug) live under
``tokenauth.infra`` and ``tokenauth.repositories``.
"""

from __future__ import annotations

from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .password_hasher import PasswordHasher
from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore
from .token_provider import (
    FACTOR_PASSWORD,
    StubTokenProvider,
    TokenProvider,
    filter_authorities,
)
from .user_directory import InMemoryUserDirectory, UserDirectory

__all__ = [
    "FACTOR_PASSWORD",
    "TokenProvider",
    "StubTokenProvider",
    "filter_authorities",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
    "UserDirectory",
    "InMemoryUserDirectory",
    "PasswordHasher",
]
