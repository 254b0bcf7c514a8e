"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Lower bound shared by both token lifetimes
MIN_TOKEN_TTL: Final[timedelta] = timedelta(seconds=60)


# Load .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_seconds(name: str, default: int) -> timedelta:
    """Read a duration expressed in whole seconds from the environment."""
    raw = os.getenv(name)
    return timedelta(seconds=int(raw) if raw else default)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Symmetric key used by ``flask-jwt-extended`` to sign and verify
        access tokens. Must be non-empty.
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Access-token lifetime (at least one minute).
    REFRESH_TOKEN_TTL: timedelta
        Refresh-token lifetime (at least one minute).
    REVOCATION_PRUNE_INTERVAL: timedelta
        Minimum spacing between opportunistic prunes of the in-memory denylist.
    REDIS_URL: str | None
        When set, revoked access tokens are tracked in Redis instead of
        process memory.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = env_seconds("ACCESS_TOKEN_TTL_SECONDS", 900)
    REFRESH_TOKEN_TTL = env_seconds("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 3600)
    REVOCATION_PRUNE_INTERVAL = env_seconds("REVOCATION_PRUNE_INTERVAL_SECONDS", 300)
    REDIS_URL = os.getenv("REDIS_URL")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_FIX_HOPS = int(os.getenv("PROXY_FIX_HOPS", "1"))

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = True

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Keeps the denylist in process memory and disables rate limiting.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy"
    REDIS_URL = None
    # Cheap hashing keeps the suite fast; never use outside tests
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_token_settings(config: Mapping[str, Any]) -> None:
    """Reject token settings that would weaken the token lifecycle.

    :param config: Loaded Flask configuration mapping.
    :raises ValueError: If the signing secret is blank or a lifetime is below
        one minute.
    """
    secret = config.get("JWT_SECRET_KEY")
    if not isinstance(secret, str) or not secret.strip():
        raise ValueError("JWT_SECRET_KEY must be a non-empty string.")

    for key in ("JWT_ACCESS_TOKEN_EXPIRES", "REFRESH_TOKEN_TTL"):
        ttl = config.get(key)
        if not isinstance(ttl, timedelta) or ttl < MIN_TOKEN_TTL:
            raise ValueError(f"{key} must be a timedelta of at least 60 seconds.")

    interval = config.get("REVOCATION_PRUNE_INTERVAL", timedelta(0))
    if not isinstance(interval, timedelta) or interval < timedelta(0):
        raise ValueError("REVOCATION_PRUNE_INTERVAL must be a non-negative timedelta.")
