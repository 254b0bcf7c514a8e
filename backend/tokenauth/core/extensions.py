"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import redis  # type: ignore[import-untyped]
from flask import Flask, Response, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from tokenauth.core.errors import as_problem, problem_response

if TYPE_CHECKING:
    from tokenauth.services._shared.ports import TokenDenylistStore

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

DENYLIST_KEY = "token_denylist"

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT, rate limiting and the denylist.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`tokenauth.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    Exactly one denylist instance is created per application and stored on
    ``app.extensions["token_denylist"]``. It is Redis-backed when
    ``REDIS_URL`` is configured and process-local otherwise.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from tokenauth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
    else:
        redis_client = redis.Redis.from_url(redis_url)
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
        app.extensions["redis_client"] = redis_client

    app.extensions[DENYLIST_KEY] = _build_denylist(app)


def _build_denylist(app: Flask) -> TokenDenylistStore:
    from tokenauth.infra.redis.redis_denylist_store import RedisTokenDenylistStore
    from tokenauth.services._shared.ports.denylist_store import InMemoryDenylistStore

    if redis_client is not None:
        app.logger.info("denylist.backend=redis")
        return RedisTokenDenylistStore(redis_client)
    app.logger.info("denylist.backend=memory")
    return InMemoryDenylistStore(prune_interval=app.config["REVOCATION_PRUNE_INTERVAL"])


def get_denylist() -> TokenDenylistStore:
    """Return the denylist bound to the current application."""
    store = current_app.extensions.get(DENYLIST_KEY)
    if store is None:
        raise RuntimeError("Token denylist is not initialized. Call init_app() first.")
    return store


# --------------------------------------------------------------------------- #
# JWT callbacks
# --------------------------------------------------------------------------- #


@jwt.token_in_blocklist_loader
def _is_token_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
    return get_denylist().is_revoked(str(jwt_payload.get("jti", "")))


@jwt.expired_token_loader
def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> Response:
    return problem_response(
        as_problem(status=401, code="token_expired", message="Token has expired")
    )


@jwt.revoked_token_loader
def _revoked_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> Response:
    return problem_response(
        as_problem(status=401, code="token_revoked", message="Token has been revoked")
    )


@jwt.invalid_token_loader
def _invalid_token(reason: str) -> Response:
    return problem_response(as_problem(status=401, code="invalid_token", message=reason))


@jwt.unauthorized_loader
def _missing_token(reason: str) -> Response:
    return problem_response(as_problem(status=401, code="authorization_required", message=reason))
