"""Shared API helpers for request parsing, service wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from tokenauth.core.extensions import get_denylist
from tokenauth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from tokenauth.infra.security.werkzeug_hasher import WerkzeugPasswordHasher
from tokenauth.services.auth.dto import AuthTokenConfig
from tokenauth.services.auth.service import AuthService
from tokenauth.services.sessions.service import SessionManager

F = TypeVar("F", bound=Callable[..., Any])


def token_config() -> AuthTokenConfig:
    """Build token lifetimes from the current application config."""

    return AuthTokenConfig(
        access_expires=current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_expires=current_app.config["REFRESH_TOKEN_TTL"],
    )


def get_session_manager() -> SessionManager:
    """Return a session manager bound to the current application."""

    return SessionManager(refresh_ttl=token_config().refresh_expires)


def get_auth_service() -> AuthService:
    """Return an auth service wired with the application's adapters."""

    cfg = token_config()
    return AuthService(
        token_provider=JWTTokenProvider(),
        denylist_store=get_denylist(),
        password_hasher=WerkzeugPasswordHasher(
            method=current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
        ),
        sessions=SessionManager(refresh_ttl=cfg.refresh_expires),
        token_cfg=cfg,
    )


def bearer_token() -> str | None:
    """Return the raw ``Authorization`` header value, if any."""

    return request.headers.get("Authorization")


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, non-revoked JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
