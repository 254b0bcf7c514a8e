from collections.abc import Callable
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]


class RedisTokenDenylistStore:
    """
    Shared denylist for **access tokens** by jti.

    Each revoked jti is a marker key whose TTL equals the token's remaining
    lifetime, so Redis expiry does the pruning.
    """

    def __init__(self, r: redis.Redis, *, clock: Callable[[], datetime] | None = None):
        self.r = r
        self._clock = clock or (lambda: datetime.now(UTC))

    @staticmethod
    def _k(jti: str) -> str:
        return f"deny:at:{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        now = self._clock().timestamp()
        ttl = max(1, int(expires_at.timestamp() - now))
        # store a small marker with TTL; idempotent
        self.r.set(self._k(jti), "1", ex=ttl)

    def prune(self, now: datetime | None = None) -> int:
        """No-op: expired markers are evicted by Redis itself."""
        return 0
