"""Refresh token model: one opaque, single-use value per live session."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tokenauth.core.extensions import db

from .base import PKMixin, ReprMixin, UTCDateTime
from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Server-side record backing an opaque refresh token.

    Fields
    ------
    token : str
        Random URL-safe value handed to the client. Unique.
    user_id : int
        Owner; rows disappear with the user (``ON DELETE CASCADE``).
    expires_at : datetime
        Absolute UTC expiry. A record is expired once ``expires_at < now``.
    created_at : datetime
        Issue instant, set once by the session manager and never updated.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    user: Mapped[User] = relationship(User)

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when the token expired strictly before ``now``."""
        return self.expires_at < now
