"""User model definition for the token authentication service."""

from __future__ import annotations

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from tokenauth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

DEFAULT_ROLE = "USER"


def _default_roles() -> list[str]:
    return [DEFAULT_ROLE]


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity known to the user directory.

    Fields
    ------
    email : str
        Login identity. Stored normalized (lowercase, trimmed).
    password_hash : str
        Salted hash produced by the password service. Never the raw secret.
    roles : list[str]
        Role names granted to the user. New accounts receive ``["USER"]``.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=_default_roles)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    @property
    def authorities(self) -> set[str]:
        """Return the granted role names as a set."""
        return set(self.roles or _default_roles())

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("roles")
    def _validate_roles(self, key: str, value: list[str]) -> list[str]:
        if not value or not all(isinstance(r, str) and r.strip() for r in value):
            raise ValueError("Roles must be a non-empty list of names.")
        return sorted({r.strip().upper() for r in value})
