# tokenauth/services/auth/service.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from tokenauth.models.user import DEFAULT_ROLE, User
from tokenauth.services._shared.base import BaseService, Clock, UnitOfWorkFactory
from tokenauth.services._shared.errors import (
    IdentityAlreadyExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    NotFoundError,
    TokenError,
    violates,
)
from tokenauth.services._shared.ports import PasswordHasher, TokenDenylistStore, TokenProvider
from tokenauth.services._shared.ports.token_provider import expires_at
from tokenauth.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)
from tokenauth.services.sessions.dto import RefreshTokenOut
from tokenauth.services.sessions.service import SessionManager

BEARER_PREFIX = "Bearer "

# SQLite reports the column, PostgreSQL the constraint name
_EMAIL_CONSTRAINTS = ("uq_users_email", "users.email")


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens are minted and verified through a pluggable
    :class:`TokenProvider`; refresh tokens are delegated to
    :class:`SessionManager`; early revocation of access tokens goes through
    :class:`TokenDenylistStore`.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        denylist_store: TokenDenylistStore,
        password_hasher: PasswordHasher,
        sessions: SessionManager | None = None,
        token_cfg: AuthTokenConfig | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter minting/verifying access tokens.
        :param denylist_store: Denylist for access tokens (JTI-based).
        :param password_hasher: One-way password hashing adapter.
        :param sessions: Refresh-token manager; built from ``token_cfg`` when omitted.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.tokens = token_provider
        self.denylist = denylist_store
        self.passwords = password_hasher
        self.cfg = token_cfg or AuthTokenConfig()
        self.sessions = sessions or SessionManager(
            refresh_ttl=self.cfg.refresh_expires,
            uow_factory=uow_factory,
            clock=clock,
        )

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> TokenPairOut:
        """
        Create a new identity and issue its first token pair.

        :param dto: Registration input.
        :returns: Access/Refresh token pair.
        :raises IdentityAlreadyExistsError: If the email is already registered.
        """
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(dto.email):
                    raise IdentityAlreadyExistsError(dto.email)
                user = User(
                    email=dto.email,
                    password_hash=self.passwords.hash(dto.password),
                    roles=[DEFAULT_ROLE],
                )
                uow.users.add(user)
        except IntegrityError as exc:
            # Concurrent registration slipped past the existence check
            if any(violates(exc, name) for name in _EMAIL_CONSTRAINTS):
                raise IdentityAlreadyExistsError(dto.email) from exc
            raise

        pair = self._issue_pair(self.sessions.create(user))
        self.log.info("auth.register user_id=%s", user.id)
        return pair

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises IdentityNotFoundError: Unknown identity.
        :raises InvalidCredentialsError: Wrong password.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None:
                self.log.info("auth.login.failed reason=unknown_identity")
                raise IdentityNotFoundError()
            if not self.passwords.verify(user.password_hash, dto.password):
                self.log.info("auth.login.failed reason=bad_password user_id=%s", user.id)
                raise InvalidCredentialsError()

        pair = self._issue_pair(self.sessions.create(user))
        self.log.info("auth.login user_id=%s", user.id)
        return pair

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises InvalidRefreshTokenError: Unknown, already used or expired token.
        """
        issued = self.sessions.rotate(dto.refresh_token)
        return self._issue_pair(issued)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, bearer: str | None) -> None:
        """
        Revoke the presented access token and drop the user's refresh tokens.

        Never fails: a missing, malformed, forged, expired or already revoked
        token is ignored, so replaying it cannot end a later session.

        :param bearer: Access token, optionally prefixed with ``"Bearer "``.
        """
        token = (bearer or "").strip()
        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX) :].strip()
        if not token:
            return

        try:
            claims = self.tokens.verify(token)
        except TokenError as exc:
            self.log.debug("auth.logout.ignored reason=%s", type(exc).__name__)
            return
        if self.denylist.is_revoked(str(claims["jti"])):
            self.log.debug("auth.logout.ignored reason=revoked")
            return

        self.denylist.revoke_jti(jti=str(claims["jti"]), expires_at=expires_at(claims))

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(str(claims["sub"]))
        if user is not None:
            self.sessions.invalidate(user)
        self.log.info("auth.logout jti=%s", claims["jti"])

    # ------------------------------------------------------------------ #
    # Who am I
    # ------------------------------------------------------------------ #

    def whoami(self, identity: str) -> UserPublicOut:
        """
        Resolve the authenticated identity into its public projection.

        :raises NotFoundError: The identity no longer exists.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(identity)
            if user is None:
                raise NotFoundError("User", identity)
            return UserPublicOut(
                id=user.id,
                email=user.email,
                roles=tuple(sorted(user.authorities)),
                created_at=user.created_at,
            )

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_pair(self, issued: RefreshTokenOut) -> TokenPairOut:
        access = self.tokens.mint(issued.subject, issued.authorities, self.cfg.access_expires)
        return TokenPairOut(
            access_token=access,
            refresh_token=issued.value,
            expires_in=int(self.cfg.access_expires.total_seconds()),
        )
