"""
Rate limiting exceptions.
"""

from .base import RestaurantException


class RateLimitExceededException(RestaurantException):
    code = "RATE_LIMITED"

    def __init__(self, operation: str, limit: int, retry_after: int | None = None):
        super().__init__(
            f"Too many requests. Limit is {limit} per hour",
            details={'operation': operation, 'limit': limit, 'retry_after': retry_after}
        )
        self.operation = operation
        self.limit = limit
        self.retry_after = retry_after
