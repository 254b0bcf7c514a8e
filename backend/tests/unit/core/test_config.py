"""Unit tests for configuration selection and token settings validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tokenauth.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_seconds,
    get_config,
    validate_token_settings,
)


def _settings(**overrides):
    base = {
        "JWT_SECRET_KEY": "k" * 32,
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(minutes=15),
        "REFRESH_TOKEN_TTL": timedelta(days=7),
        "REVOCATION_PRUNE_INTERVAL": timedelta(minutes=5),
    }
    base.update(overrides)
    return base


class TestValidateTokenSettings:
    def test_accepts_defaults(self):
        validate_token_settings(_settings())

    def test_accepts_one_minute_lifetimes(self):
        validate_token_settings(
            _settings(
                JWT_ACCESS_TOKEN_EXPIRES=timedelta(seconds=60),
                REFRESH_TOKEN_TTL=timedelta(seconds=60),
            )
        )

    @pytest.mark.parametrize("secret", ["", "   ", None])
    def test_rejects_blank_secret(self, secret):
        with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
            validate_token_settings(_settings(JWT_SECRET_KEY=secret))

    @pytest.mark.parametrize("key", ["JWT_ACCESS_TOKEN_EXPIRES", "REFRESH_TOKEN_TTL"])
    @pytest.mark.parametrize("value", [timedelta(seconds=59), timedelta(0), 900, None])
    def test_rejects_short_or_untyped_lifetimes(self, key, value):
        with pytest.raises(ValueError, match=key):
            validate_token_settings(_settings(**{key: value}))

    def test_rejects_negative_prune_interval(self):
        with pytest.raises(ValueError, match="REVOCATION_PRUNE_INTERVAL"):
            validate_token_settings(_settings(REVOCATION_PRUNE_INTERVAL=timedelta(seconds=-1)))

    def test_testing_config_is_valid(self):
        settings = {k: getattr(TestingConfig, k) for k in dir(TestingConfig) if k.isupper()}

        validate_token_settings(settings)


class TestEnvironmentHelpers:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("development", DevelopmentConfig),
            ("testing", TestingConfig),
            ("PRODUCTION", ProductionConfig),
            ("unknown", DevelopmentConfig),
        ],
    )
    def test_get_config(self, monkeypatch, name, expected):
        monkeypatch.setenv("APP_ENV", name)

        assert get_config() is expected

    def test_get_config_defaults_to_development(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

        assert get_config() is DevelopmentConfig

    @pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SOME_FLAG", raw)

        assert env_bool("SOME_FLAG") is expected

    def test_env_seconds(self, monkeypatch):
        monkeypatch.setenv("SOME_TTL", "120")
        monkeypatch.delenv("MISSING_TTL", raising=False)

        assert env_seconds("SOME_TTL", 5) == timedelta(minutes=2)
        assert env_seconds("MISSING_TTL", 5) == timedelta(seconds=5)
