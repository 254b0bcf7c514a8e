"""Tests for AuthService over in-memory stores and a stub token provider."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.user import test_hasher
from tokenauth.services._shared.errors import (
    IdentityAlreadyExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
    TokenExpiredError,
)
from tokenauth.services._shared.ports import (
    FACTOR_PASSWORD,
    InMemoryDenylistStore,
    InMemoryUserDirectory,
    StubTokenProvider,
)
from tokenauth.services.auth.dto import AuthTokenConfig, LoginIn, RefreshIn, RegisterIn
from tokenauth.services.auth.service import AuthService
from tokenauth.uow.memory_uow import InMemoryUnitOfWork

T0 = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return Clock(T0)


@pytest.fixture()
def tokens(clock):
    return StubTokenProvider(clock=clock)


@pytest.fixture()
def denylist(clock):
    return InMemoryDenylistStore(clock=clock)


@pytest.fixture()
def svc(tokens, denylist, memory_uow_factory, clock):
    return AuthService(
        token_provider=tokens,
        denylist_store=denylist,
        password_hasher=test_hasher,
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(minutes=15),
            refresh_expires=timedelta(days=7),
        ),
        uow_factory=memory_uow_factory,
        clock=clock,
    )


def _register(svc, email="a@x.com", password="s3cret-pass"):
    return svc.register(RegisterIn(email=email, password=password))


# ------------------------------- register ------------------------------------


def test_register_returns_pair_for_new_identity(svc, tokens, memory_stores):
    pair = _register(svc)

    claims = tokens.verify(pair.access_token)
    assert claims["sub"] == "a@x.com"
    assert claims["authorities"] == ["USER"]
    assert claims["exp"] - claims["iat"] == 900
    assert pair.expires_in == 900
    assert pair.token_type == "bearer"

    users, refresh_tokens = memory_stores
    user = users.get_by_email("a@x.com")
    assert user.password_hash != "s3cret-pass"
    assert refresh_tokens.find_by_value(pair.refresh_token).user_id == user.id


def test_register_rejects_taken_identity(svc):
    _register(svc)

    with pytest.raises(IdentityAlreadyExistsError):
        _register(svc, email="A@X.com ")


def test_register_translates_unique_violation_from_a_race(tokens, denylist, memory_stores, clock):
    users, refresh_tokens = memory_stores

    class RacingDirectory(InMemoryUserDirectory):
        """Existence check misses the row a concurrent request just inserted."""

        def exists_by_email(self, email: str) -> bool:
            return False

    racing = RacingDirectory()
    svc = AuthService(
        token_provider=tokens,
        denylist_store=denylist,
        password_hasher=test_hasher,
        uow_factory=lambda: InMemoryUnitOfWork(users=racing, refresh_tokens=refresh_tokens),
        clock=clock,
    )
    _register(svc)

    with pytest.raises(IdentityAlreadyExistsError):
        _register(svc)


# --------------------------------- login -------------------------------------


def test_login_issues_new_pair_and_replaces_refresh(svc, memory_stores):
    first = _register(svc)

    pair = svc.login(LoginIn(email="a@x.com", password="s3cret-pass"))

    _, refresh_tokens = memory_stores
    assert pair.refresh_token != first.refresh_token
    assert refresh_tokens.find_by_value(first.refresh_token) is None
    assert len(refresh_tokens) == 1


def test_unknown_identity_and_bad_password_look_the_same(svc):
    _register(svc)

    with pytest.raises(IdentityNotFoundError) as unknown:
        svc.login(LoginIn(email="nobody@x.com", password="s3cret-pass"))
    with pytest.raises(InvalidCredentialsError) as wrong:
        svc.login(LoginIn(email="a@x.com", password="wrong-pass"))

    assert str(unknown.value) == str(wrong.value) == "Invalid credentials"
    assert isinstance(unknown.value, InvalidCredentialsError)


def test_authorities_follow_roles(svc, tokens, memory_stores):
    _register(svc)
    users, _ = memory_stores
    users.get_by_email("a@x.com").roles = ["USER", "ADMIN"]

    pair = svc.login(LoginIn(email="a@x.com", password="s3cret-pass"))

    assert tokens.verify(pair.access_token)["authorities"] == ["ADMIN", "USER"]


def test_factor_marker_never_reaches_the_token(svc, tokens, memory_stores):
    _register(svc)
    users, _ = memory_stores
    users.get_by_email("a@x.com").roles = ["USER", FACTOR_PASSWORD]

    pair = svc.login(LoginIn(email="a@x.com", password="s3cret-pass"))

    assert FACTOR_PASSWORD not in tokens.verify(pair.access_token)["authorities"]


# -------------------------------- refresh ------------------------------------


def test_refresh_rotates_and_old_value_is_dead(svc, tokens):
    first = _register(svc)

    second = svc.refresh(RefreshIn(refresh_token=first.refresh_token))

    assert second.refresh_token != first.refresh_token
    assert tokens.verify(second.access_token)["sub"] == "a@x.com"
    with pytest.raises(InvalidRefreshTokenError):
        svc.refresh(RefreshIn(refresh_token=first.refresh_token))
    # The replacement is still usable
    assert svc.refresh(RefreshIn(refresh_token=second.refresh_token)).access_token


def test_refresh_after_expiry_fails(svc, clock):
    first = _register(svc)
    clock.now = T0 + timedelta(days=8)

    with pytest.raises(InvalidRefreshTokenError, match="expired"):
        svc.refresh(RefreshIn(refresh_token=first.refresh_token))


# -------------------------------- logout -------------------------------------


def test_logout_revokes_access_and_drops_refresh(svc, tokens, denylist, memory_stores):
    pair = _register(svc)
    jti = tokens.verify(pair.access_token)["jti"]

    svc.logout(pair.access_token)

    _, refresh_tokens = memory_stores
    assert denylist.is_revoked(jti)
    assert len(refresh_tokens) == 0
    with pytest.raises(InvalidRefreshTokenError):
        svc.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_logout_accepts_bearer_prefix(svc, tokens, denylist):
    pair = _register(svc)

    svc.logout(f"Bearer {pair.access_token}")

    assert denylist.is_revoked(tokens.verify(pair.access_token)["jti"])


@pytest.mark.parametrize("presented", [None, "", "Bearer ", "garbage", "Bearer garbage"])
def test_logout_ignores_unusable_tokens(svc, denylist, presented):
    _register(svc)

    svc.logout(presented)

    assert len(denylist) == 0


def test_logout_ignores_expired_token(svc, denylist, clock, memory_stores):
    pair = _register(svc)
    clock.now = T0 + timedelta(minutes=16)

    svc.logout(pair.access_token)

    assert len(denylist) == 0
    assert len(memory_stores[1]) == 1


def test_access_token_valid_until_exact_expiry(svc, tokens, clock):
    pair = _register(svc)
    clock.now = T0 + timedelta(minutes=15)

    assert tokens.verify(pair.access_token)["sub"] == "a@x.com"

    clock.now += timedelta(seconds=1)
    with pytest.raises(TokenExpiredError):
        tokens.verify(pair.access_token)


def test_replayed_logout_leaves_later_session_alone(svc, memory_stores):
    old = _register(svc)
    svc.logout(old.access_token)
    fresh = svc.login(LoginIn(email="a@x.com", password="s3cret-pass"))

    svc.logout(old.access_token)

    assert memory_stores[1].find_by_value(fresh.refresh_token) is not None
    assert svc.refresh(RefreshIn(refresh_token=fresh.refresh_token)).access_token


def test_revocation_entry_expires_with_the_token(svc, tokens, denylist, clock):
    pair = _register(svc)
    jti = tokens.verify(pair.access_token)["jti"]
    svc.logout(pair.access_token)

    assert denylist.prune(T0 + timedelta(minutes=14)) == 0
    assert denylist.prune(T0 + timedelta(minutes=15)) == 1
    assert not denylist.is_revoked(jti)


# -------------------------------- whoami -------------------------------------


def test_whoami(svc):
    _register(svc)

    me = svc.whoami("a@x.com")

    assert me.email == "a@x.com"
    assert me.roles == ("USER",)


def test_whoami_unknown_identity(svc):
    with pytest.raises(NotFoundError):
        svc.whoami("ghost@x.com")
