"""
Tests for the Redis-backed RateLimiter (fakeredis, no server needed).
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from enums.rate_limit_operation import RateLimitOperation
from exceptions.rate_limit import RateLimitExceededException
from middleware.rate_limit import RateLimiter


class TestRateLimiter:

    @pytest.mark.asyncio
    async def test_counts_and_remaining(self, redis_client):
        limiter = RateLimiter(redis_client)

        first = await limiter.is_rate_limited("order_create", "user:1", 2, 3600)
        second = await limiter.is_rate_limited("order_create", "user:1", 2, 3600)
        third = await limiter.is_rate_limited("order_create", "user:1", 2, 3600)

        assert first == (False, 1, 1)
        assert second == (False, 2, 0)
        assert third == (True, 3, 0)

    @pytest.mark.asyncio
    async def test_window_set_on_first_hit(self, redis_client):
        limiter = RateLimiter(redis_client)

        await limiter.is_rate_limited("order_create", "user:1", 5, 3600)

        assert 0 < await redis_client.ttl("rate_limit:order_create:user:1") <= 3600

    @pytest.mark.asyncio
    async def test_enforce_uses_configured_limit(self, redis_client):
        limiter = RateLimiter(redis_client)

        # MAX_ORDERS_PER_USER_PER_HOUR=3 in tests
        for _ in range(3):
            await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:1")

        with pytest.raises(RateLimitExceededException) as exc_info:
            await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:1")

        assert exc_info.value.limit == 3
        assert 0 < exc_info.value.retry_after <= 3600

    @pytest.mark.asyncio
    async def test_subjects_and_operations_are_independent(self, redis_client):
        limiter = RateLimiter(redis_client)
        for _ in range(3):
            await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:1")

        await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:2")
        await limiter.enforce(RateLimitOperation.PAYMENT_INITIATE, "user:1")

    @pytest.mark.asyncio
    async def test_reset(self, redis_client):
        limiter = RateLimiter(redis_client)
        for _ in range(3):
            await limiter.enforce(RateLimitOperation.ORDER_CREATE, "ip:10.0.0.1")

        await limiter.reset_limit(RateLimitOperation.ORDER_CREATE.value, "ip:10.0.0.1")

        await limiter.enforce(RateLimitOperation.ORDER_CREATE, "ip:10.0.0.1")
        assert await limiter.get_remaining_time("unknown_op", "ip:10.0.0.1") == 0

    @pytest.mark.asyncio
    async def test_fails_open_when_redis_is_down(self):
        broken = MagicMock()
        broken.incr = AsyncMock(side_effect=ConnectionError("redis unavailable"))
        broken.ttl = AsyncMock(side_effect=ConnectionError("redis unavailable"))
        limiter = RateLimiter(broken)

        for _ in range(10):
            await limiter.enforce(RateLimitOperation.ORDER_CREATE, "user:1")

        assert await limiter.get_remaining_time("order_create", "user:1") == 0
