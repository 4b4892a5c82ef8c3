"""
hackhub/rate_limit.py
Rate limiting for registration creation and the API as a whole.

Registration attempts are limited per user with a sliding window:
- RedisRateLimiter: sorted set per key with TTL. Shared by every worker and
  instance, so it is the one to run in production.
- InMemoryRateLimiter: per-process counters. Only correct for a single
  instance; every additional worker gets its own budget.

The general per-IP API limit is enforced by slowapi, stored in the same
Redis when REDIS_URL is set.
"""
import logging
import time
import uuid
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from fastapi import Depends
from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError
from slowapi import Limiter
from slowapi.util import get_remote_address

from hackhub.config import settings
from hackhub.errors import RateLimitError
from hackhub.orm.profile import Profile
from hackhub.security import get_current_user

logger = logging.getLogger(__name__)

REGISTRATION_LIMIT_TYPE = "registration"

# Idle keys are swept from the in-memory limiter this often
CLEANUP_INTERVAL_SECONDS = 600


class InMemoryRateLimiter:
    """
    In-process sliding window rate limiter.

    Scaling limitation: state lives in this process only. Use
    RedisRateLimiter whenever more than one worker or instance serves traffic.
    """

    def __init__(self, max_requests: int, window_seconds: int, cleanup_interval_seconds: int = CLEANUP_INTERVAL_SECONDS):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        # key -> request timestamps inside the window
        self.requests: Dict[str, List[float]] = defaultdict(list)
        self._last_cleanup = time.time()

    def _make_key(self, limit_type: str, identifier: str) -> str:
        return f"ratelimit:{limit_type}:{identifier}"

    async def check_rate_limit(self, limit_type: str, identifier: str) -> Tuple[bool, int, int]:
        """
        Record one request and report whether it is within the limit.

        Returns:
            Tuple of (allowed, remaining, reset_seconds)
        """
        now = time.time()
        if now - self._last_cleanup >= self.cleanup_interval_seconds:
            self.cleanup()
            self._last_cleanup = now

        key = self._make_key(limit_type, identifier)

        # Clean old entries
        window = [ts for ts in self.requests[key] if now - ts < self.window_seconds]

        if len(window) >= self.max_requests:
            self.requests[key] = window
            reset_seconds = int(self.window_seconds - (now - window[0])) + 1
            return (False, 0, reset_seconds)

        window.append(now)
        self.requests[key] = window
        reset_seconds = int(self.window_seconds - (now - window[0])) + 1
        return (True, self.max_requests - len(window), reset_seconds)

    def cleanup(self) -> int:
        """Drop keys whose window has fully expired. Returns number of keys removed."""
        now = time.time()
        expired = [
            key for key, stamps in self.requests.items()
            if not stamps or now - stamps[-1] >= self.window_seconds
        ]
        for key in expired:
            del self.requests[key]
        return len(expired)

    async def close(self) -> None:
        self.requests.clear()


# Prune, count and admit in one server-side step. Rejected attempts are never
# added, so concurrent callers at the limit cannot inflate each other's count.
SLIDING_WINDOW_SCRIPT = """
redis.call('ZREMRANGEBYSCORE', KEYS[1], 0, ARGV[1])
local count = redis.call('ZCARD', KEYS[1])
if count >= tonumber(ARGV[3]) then
    return {0, count, redis.call('TTL', KEYS[1])}
end
redis.call('ZADD', KEYS[1], ARGV[2], ARGV[4])
redis.call('EXPIRE', KEYS[1], ARGV[5])
return {1, count + 1, tonumber(ARGV[5])}
"""


class RedisRateLimiter:
    """
    Distributed rate limiter using Redis.

    Guarantees:
    - Sliding window via sorted set, checked and updated atomically (Lua)
    - Cross-worker consistency
    - TTL-based key expiration
    """

    def __init__(self, redis_url: str, max_requests: int, window_seconds: int):
        self.redis_url = redis_url
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._redis: Optional[redis_asyncio.Redis] = None
        self._script = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._redis = redis_asyncio.from_url(self.redis_url, decode_responses=True)
        self._script = self._redis.register_script(SLIDING_WINDOW_SCRIPT)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            self._script = None

    def _make_key(self, limit_type: str, identifier: str) -> str:
        return f"ratelimit:{limit_type}:{identifier}"

    async def check_rate_limit(self, limit_type: str, identifier: str) -> Tuple[bool, int, int]:
        if not self._redis:
            await self.connect()

        key = self._make_key(limit_type, identifier)
        now = time.time()
        member = f"{now:.6f}:{uuid.uuid4().hex[:8]}"

        allowed, current_count, ttl = await self._script(
            keys=[key],
            args=[now - self.window_seconds, now, self.max_requests, member, self.window_seconds],
        )

        if not allowed:
            return (False, 0, ttl if ttl > 0 else self.window_seconds)
        return (True, self.max_requests - current_count, self.window_seconds)


_registration_limiter = None


def build_registration_limiter():
    if settings.REDIS_URL:
        logger.info("Registration rate limiter: Redis (shared across instances)")
        return RedisRateLimiter(
            settings.REDIS_URL,
            settings.REGISTRATION_RATE_LIMIT,
            settings.REGISTRATION_RATE_WINDOW_SECONDS,
        )
    logger.warning(
        "Registration rate limiter: in-memory. Limits are per process; "
        "set REDIS_URL before running more than one instance."
    )
    return InMemoryRateLimiter(
        settings.REGISTRATION_RATE_LIMIT,
        settings.REGISTRATION_RATE_WINDOW_SECONDS,
    )


def get_registration_limiter():
    """Get or create the process-wide registration limiter."""
    global _registration_limiter
    if _registration_limiter is None:
        _registration_limiter = build_registration_limiter()
    return _registration_limiter


def set_registration_limiter(new_limiter) -> None:
    global _registration_limiter
    _registration_limiter = new_limiter


async def enforce_registration_rate_limit(
    current_user: Profile = Depends(get_current_user),
) -> Profile:
    """Dependency: reject the caller with 429 once their registration budget is spent."""
    limiter = get_registration_limiter()
    try:
        allowed, remaining, reset_seconds = await limiter.check_rate_limit(
            REGISTRATION_LIMIT_TYPE, str(current_user.id)
        )
    except RedisError as e:
        # Fail open while Redis is down
        logger.error(f"Rate limiter unavailable, allowing request: {e}")
        return current_user

    if not allowed:
        logger.info(f"[RATE LIMITED] user={current_user.id} retry_after={reset_seconds}s")
        raise RateLimitError(retry_after=reset_seconds)
    return current_user


# Global per-IP API limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.API_RATE_LIMIT],
    storage_uri=settings.REDIS_URL or "memory://",
)
