"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`tokenauth.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``tokenauth.services._shared.base``)
    * :class:`BaseService`

- Session manager (from ``tokenauth.services.sessions``)
    * :class:`SessionManager`
    * DTOs: :class:`RefreshTokenOut`

- Auth service (from ``tokenauth.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`TokenPairOut`, :class:`UserPublicOut`, :class:`AuthTokenConfig`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService

# Auth service + DTOs
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)
from .auth.service import AuthService

# Session manager + DTOs
from .sessions.dto import RefreshTokenOut
from .sessions.service import SessionManager

__all__ = [
    # Base
    "BaseService",
    # Sessions
    "SessionManager",
    "RefreshTokenOut",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "TokenPairOut",
    "UserPublicOut",
]
