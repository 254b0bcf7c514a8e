from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash


@dataclass(slots=True)
class WerkzeugPasswordHasher:
    """Password hashing backed by :mod:`werkzeug.security` (scrypt by default)."""

    method: str = "scrypt"

    def hash(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(raw, method=self.method)

    def verify(self, hashed: str, raw: str) -> bool:
        if not hashed:
            return False
        # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
        return bool(check_password_hash(hashed, raw))
