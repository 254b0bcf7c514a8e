"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between repositories,
token adapters and application services.

The translation to HTTP responses (RFC 7807) is handled by
``tokenauth/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    # PostgreSQL reports the constraint name; SQLite reports "table.column"
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer or BaseService will later translate them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class IdentityAlreadyExistsError(ConflictError):
    """Raised on registration when the identity is already taken."""

    def __init__(self, email: str) -> None:
        super().__init__(entity="User", detail=f"identity '{email}' is already registered")


class AuthenticationError(ServiceError):
    """Base class for failures that must surface as 401 to clients."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidCredentialsError(AuthenticationError):
    """Raised when an identity/secret pair does not verify."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class IdentityNotFoundError(InvalidCredentialsError):
    """
    Raised when the identity is unknown to the directory.

    Subclasses :class:`InvalidCredentialsError` and keeps the same message so
    callers cannot tell an unknown identity apart from a wrong secret.
    """


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when a refresh token is missing, already used or expired."""

    NOT_FOUND = "Refresh token not found or already used"
    EXPIRED = "Refresh token has expired"


# --------------------------------------------------------------------------- #
# Token verification errors
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for access-token verification failures."""


class InvalidSignatureError(TokenError):
    """The token signature does not match the configured key."""


class TokenExpiredError(TokenError):
    """The token ``exp`` claim lies in the past."""


class MalformedTokenError(TokenError):
    """The token cannot be parsed or lacks required claims."""
