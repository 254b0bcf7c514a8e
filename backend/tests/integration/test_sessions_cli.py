"""Tests for the ``flask sessions`` maintenance commands."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from tests.factories.refresh_token import RefreshTokenFactory
from tokenauth.repositories.refresh_token import RefreshTokenRepository


def test_purge_expired_removes_only_stale_tokens(app, session):
    now = datetime.now(UTC)
    stale = RefreshTokenFactory(
        created_at=now - timedelta(days=8),
        expires_at=now - timedelta(days=1),
    )
    live = RefreshTokenFactory()
    stale_value, live_value = stale.token, live.token

    result = app.test_cli_runner().invoke(args=["sessions", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 expired refresh token(s)." in result.output
    repo = RefreshTokenRepository()
    assert repo.find_by_value(stale_value) is None
    assert repo.find_by_value(live_value) is not None


def test_prune_revoked_drops_expired_entries(app, denylist):
    now = datetime.now(UTC)
    denylist.revoke_jti(jti="old", expires_at=now - timedelta(minutes=1))
    denylist.revoke_jti(jti="live", expires_at=now + timedelta(minutes=15))

    result = app.test_cli_runner().invoke(args=["sessions", "prune-revoked"])

    assert result.exit_code == 0, result.output
    assert "Pruned 1 revoked access token(s)." in result.output
    assert denylist.is_revoked("live")
    assert not denylist.is_revoked("old")
