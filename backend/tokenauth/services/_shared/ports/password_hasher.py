from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing and verification."""

    def hash(self, raw: str) -> str:
        """Return a salted hash for ``raw``."""
        ...

    def verify(self, hashed: str, raw: str) -> bool:
        """Return ``True`` when ``raw`` matches ``hashed``."""
        ...
