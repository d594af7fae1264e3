"""
Guest throttle - caps unauthenticated assistant requests per session id.

Fixed-window counter in Redis: the first hit creates the key with the window TTL,
later hits only increment it. Precision at this volume does not need a sliding window.
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging
import redis

from app.session.session_layer import get_redis_client

logger = logging.getLogger(__name__)

GUEST_KEY_PREFIX = "chat:guest:"


@dataclass(frozen=True)
class GuestAllowance:
    allowed: bool
    used: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)


class GuestThrottle:
    """Counts guest requests per session id within a fixed window."""

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        client_factory: Callable[[], redis.Redis] = get_redis_client,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._client_factory = client_factory

    def _key(self, session_id: str) -> str:
        return f"{GUEST_KEY_PREFIX}{session_id}"

    def hit(self, session_id: str) -> GuestAllowance:
        """Count one request and report whether it may proceed. Fails open on Redis errors."""
        key = self._key(session_id)
        try:
            client = self._client_factory()
            count = client.incr(key)
            if count == 1:
                client.expire(key, self.window_seconds)
        except redis.RedisError as e:
            logger.warning("Guest throttle unavailable, allowing request: %s", e)
            return GuestAllowance(allowed=True, used=0, limit=self.limit)
        return GuestAllowance(allowed=count <= self.limit, used=count, limit=self.limit)

    def used(self, session_id: str) -> int:
        try:
            value: Optional[str] = self._client_factory().get(self._key(session_id))
        except redis.RedisError as e:
            logger.warning("Guest throttle unavailable: %s", e)
            return 0
        return int(value) if value else 0
