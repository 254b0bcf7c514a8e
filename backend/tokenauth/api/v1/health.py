"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tokenauth.api.deps import json_response, timing
from tokenauth.core import extensions
from tokenauth.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and denylist backend health."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    denylist = "memory"
    if extensions.redis_client is not None:
        denylist = "redis"
        try:
            extensions.redis_client.ping()
        except RedisError:  # pragma: no cover - depends on Redis availability
            current_app.logger.exception("healthcheck.redis_error")
            denylist = "redis:fail"

    payload = {
        "status": "ok" if db_status == "ok" and not denylist.endswith("fail") else "degraded",
        "db": db_status,
        "denylist": denylist,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload)
