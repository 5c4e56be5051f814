from enum import Enum


class RateLimitOperation(str, Enum):
    """
    Rate limit operation types.

    Each operation has its own independent rate limit counter.
    """

    ORDER_CREATE = "order_create"
    """
    Rate limit for order creation.
    Config: MAX_ORDERS_PER_USER_PER_HOUR
    Default: 5 orders per hour
    """

    PAYMENT_INITIATE = "payment_initiate"
    """
    Rate limit for payment (re-)initiation.
    Config: MAX_PAYMENT_INITIATIONS_PER_HOUR
    Prevents spamming the gateway with QR generation requests.
    """
