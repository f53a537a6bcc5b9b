"""Rate limiting for credential endpoints."""

import os
import time

import structlog
from fastapi import HTTPException, Request, status

logger = structlog.get_logger(__name__)


class RateLimiter:
    """In-memory token bucket rate limiter keyed by client.

    Each key gets ``burst_size`` tokens that refill at
    ``requests_per_minute / 60`` tokens per second.
    """

    def __init__(
        self,
        requests_per_minute: int = 10,
        burst_size: int | None = None,
        cleanup_interval: int = 60,
    ):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Sustained requests allowed per minute per client
            burst_size: Maximum back-to-back requests (defaults to requests_per_minute)
            cleanup_interval: Interval (seconds) between sweeps of idle buckets
        """
        self.requests_per_minute = requests_per_minute
        self.burst_size = burst_size or requests_per_minute
        self.cleanup_interval = cleanup_interval

        # key -> (tokens, last_update)
        self.buckets: dict[str, tuple[float, float]] = {}
        self.last_cleanup = time.time()

    def _refill_tokens(self, key: str, now: float) -> float:
        tokens, last_update = self.buckets.get(key, (float(self.burst_size), now))
        refilled = tokens + (now - last_update) * (self.requests_per_minute / 60.0)
        return min(refilled, float(self.burst_size))

    @property
    def retry_after(self) -> int:
        return max(1, int(60 / self.requests_per_minute))

    def check(self, key: str) -> None:
        """Consume a token for key.

        Raises:
            HTTPException: 429 when the bucket is empty
        """
        now = time.time()
        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_entries(now)
            self.last_cleanup = now

        tokens = self._refill_tokens(key, now)
        if tokens < 1.0:
            self.buckets[key] = (tokens, now)
            logger.warning("rate_limit_exceeded", client=key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many attempts. Maximum {self.requests_per_minute} per minute allowed",
                headers={"Retry-After": str(self.retry_after)},
            )

        self.buckets[key] = (tokens - 1.0, now)

    def reset(self) -> None:
        self.buckets.clear()

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop buckets that have been idle long enough to be full again."""
        cutoff_time = now - (self.cleanup_interval * 2)
        for key in [k for k, (_, last) in self.buckets.items() if last < cutoff_time]:
            del self.buckets[key]


# Shared by login and register
auth_rate_limiter = RateLimiter(
    requests_per_minute=int(os.getenv("LOGIN_RATE_LIMIT_PER_MINUTE", "10")),
)


async def check_auth_rate_limit(request: Request) -> None:
    """FastAPI dependency limiting credential attempts per client address.

    Example:
        @router.post("/login", dependencies=[Depends(check_auth_rate_limit)])
    """
    client = request.client.host if request.client else "unknown"
    auth_rate_limiter.check(client)
