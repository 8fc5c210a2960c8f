# =============================================================================
# Rate Limiter — Redis-Based Per-Client Sliding Window
# =============================================================================
#
# Every request under /api is recorded in a Redis sorted set keyed by
# client IP, scored by arrival time. Entries older than the window are
# pruned on each check; what is left is the client's recent traffic.
#
# Default quota: 100 requests per 15 minutes per client IP.
#
# DESIGN DECISION: Retry-After is derived from the OLDEST hit still in
# the window, i.e. the moment one slot frees up, rather than the full
# window length.
#
# DESIGN DECISION: Graceful degradation. If Redis is unavailable,
# rate limiting is bypassed (log a warning, allow the request).
# =============================================================================

from __future__ import annotations

import logging
import math
import time

from fastapi import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

# Lazy Redis connection
_redis_client = None


def _get_rate_limit_redis():
    """Lazily create and cache the async Redis client for rate limiting."""
    global _redis_client
    if _redis_client is None:
        import redis.asyncio as aioredis
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


def _client_key(client_id: str) -> str:
    return f"ratelimit:client:{client_id}"


async def _record_hit(
    redis_key: str,
    now: float,
    window_seconds: int,
) -> tuple[int, float | None]:
    """
    Prune, count and record one request in a single round trip.

    Returns:
        (hits already in the window, score of the oldest of them or None)
    """
    pipe = _get_rate_limit_redis().pipeline()
    pipe.zremrangebyscore(redis_key, 0, now - window_seconds)
    pipe.zcard(redis_key)
    pipe.zrange(redis_key, 0, 0, withscores=True)
    pipe.zadd(redis_key, {str(now): now})
    pipe.expire(redis_key, window_seconds + 10)
    _, count, oldest, _, _ = await pipe.execute()

    oldest_score = float(oldest[0][1]) if oldest else None
    return count, oldest_score


def _retry_after(oldest: float | None, now: float, window_seconds: int) -> int:
    if oldest is None:
        return window_seconds
    return max(1, math.ceil(oldest + window_seconds - now))


async def check_rate_limit(client_id: str | None) -> None:
    """
    Check whether a client has exceeded its request quota.

    Raises:
        HTTPException 429: Rate limit exceeded (includes Retry-After header).

    No-op when rate limiting is disabled, the client cannot be
    identified, or Redis is unavailable.
    """
    if not settings.rate_limit_enabled or not client_id:
        return

    window_seconds = settings.rate_limit_window_seconds
    now = time.time()

    try:
        count, oldest = await _record_hit(
            _client_key(client_id), now, window_seconds,
        )
    except Exception as e:
        logger.warning(
            "Rate limiter unavailable (Redis error): %s. "
            "Allowing request through.",
            e,
        )
        return

    if count >= settings.rate_limit_requests:
        logger.info("Rate limit hit for client %s (%d requests)", client_id, count)
        raise HTTPException(
            status_code=429,
            detail=RATE_LIMIT_MESSAGE,
            headers={
                "Retry-After": str(_retry_after(oldest, now, window_seconds)),
            },
        )
