"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request
from flask_jwt_extended import get_jwt_identity

from tokenauth.api.deps import (
    bearer_token,
    get_auth_service,
    json_response,
    require_auth,
    timing,
)
from tokenauth.core.extensions import limiter
from tokenauth.schemas import (
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from tokenauth.services._shared.errors import ServiceError
from tokenauth.services.auth.dto import LoginIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
whoami_schema = WhoAmISchema()
token_schema = TokenPairSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/register")
@timing
def register():
    """Register a new user and return its first token pair."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        pair = service.register(RegisterIn(**payload))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"data": token_schema.dump(pair)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    payload = login_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        pair = service.login(LoginIn(**payload))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented access token and the user's refresh tokens.

    Always answers 204, even for a missing or unusable token.
    """

    get_auth_service().logout(bearer_token())
    return Response(status=204)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token and issue a new token pair."""

    payload = refresh_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        pair = service.refresh(RefreshIn(**payload))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"data": token_schema.dump(pair)})


@bp.get("/me")
@require_auth
@timing
def whoami():
    """Return the authenticated user profile."""

    service = get_auth_service()
    try:
        user = service.whoami(get_jwt_identity())
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"data": whoami_schema.dump(user)})
