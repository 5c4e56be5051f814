"""
Rate Limiting

Protects the ordering endpoints from abuse using Redis-based counters.

Features:
- Per-user rate limiting for order creation
- Per-user rate limiting for payment (re-)initiation
- Configurable limits via environment variables
- Automatic expiry using Redis TTL
- Fails open: a Redis outage never blocks ordering

Configuration:
- MAX_ORDERS_PER_USER_PER_HOUR: Maximum orders per user per hour
- MAX_PAYMENT_INITIATIONS_PER_HOUR: Maximum payment initiations per user per hour
"""

import logging

from redis.asyncio import Redis

import config
from enums.rate_limit_operation import RateLimitOperation
from exceptions.rate_limit import RateLimitExceededException

_redis_client: Redis | None = None


def get_redis() -> Redis:
    """Shared Redis client, created on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis(host=config.REDIS_HOST, port=6379, password=config.REDIS_PASSWORD)
    return _redis_client


async def close_redis():
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class RateLimiter:
    """
    Redis-based rate limiter for specific operations.

    Usage:
        limiter = RateLimiter(redis)
        await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:42")
    """

    LIMITS: dict[RateLimitOperation, tuple[str, int]] = {
        RateLimitOperation.ORDER_CREATE: ("MAX_ORDERS_PER_USER_PER_HOUR", 3600),
        RateLimitOperation.PAYMENT_INITIATE: ("MAX_PAYMENT_INITIATIONS_PER_HOUR", 3600),
    }

    def __init__(self, redis: Redis):
        self.redis = redis

    async def is_rate_limited(
        self,
        operation: str,
        subject: str | int,
        max_count: int,
        window_seconds: int
    ) -> tuple[bool, int, int]:
        """
        Check if a subject has exceeded the rate limit for an operation.

        Args:
            operation: Operation name (e.g., "order_create")
            subject: User id, or "ip:<address>" for guests
            max_count: Maximum allowed operations in time window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_limited, current_count, remaining_count)
        """
        key = f"rate_limit:{operation}:{subject}"

        try:
            # Increment counter (creates key if doesn't exist)
            current_count = await self.redis.incr(key)

            # Set expiry on first increment
            if current_count == 1:
                await self.redis.expire(key, window_seconds)

            is_limited = current_count > max_count
            remaining = max(0, max_count - current_count)

            if is_limited:
                ttl = await self.redis.ttl(key)
                logging.warning(
                    f"Rate limit exceeded: subject={subject}, operation={operation}, "
                    f"count={current_count}/{max_count}, resets_in={ttl}s"
                )

            return is_limited, current_count, remaining

        except Exception as e:
            # If Redis fails, don't block the operation (fail open)
            logging.error(f"Rate limiter error: {e}")
            return False, 0, max_count

    async def enforce(self, operation: RateLimitOperation, subject: str | int):
        """
        Raises:
            RateLimitExceededException: If the configured hourly limit is exceeded
        """
        config_name, window_seconds = self.LIMITS[operation]
        max_count = getattr(config, config_name)
        is_limited, _, _ = await self.is_rate_limited(operation.value, subject, max_count, window_seconds)
        if is_limited:
            retry_after = await self.get_remaining_time(operation.value, subject)
            raise RateLimitExceededException(operation.value, max_count, retry_after)

    async def reset_limit(self, operation: str, subject: str | int):
        key = f"rate_limit:{operation}:{subject}"
        await self.redis.delete(key)
        logging.info(f"Rate limit reset: subject={subject}, operation={operation}")

    async def get_remaining_time(self, operation: str, subject: str | int) -> int:
        """
        Remaining seconds until the counter resets (0 if no window is active).
        """
        key = f"rate_limit:{operation}:{subject}"
        try:
            ttl = await self.redis.ttl(key)
        except Exception as e:
            logging.error(f"Rate limiter error: {e}")
            return 0
        return ttl if ttl > 0 else 0
