"""
Custom exceptions for the restaurant ordering backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application. Every exception carries a stable machine code
(``exc.code``) that is returned to API clients.

Exception Hierarchy:
--------------------
RestaurantException (base)
├── CartException
│   ├── EmptyCartException                      CART_EMPTY
│   └── InvalidCartException                    CART_INVALID
├── OrderException
│   ├── OrderNotFoundException                  ORDER_NOT_FOUND
│   │   └── OrderOwnershipException             ORDER_NOT_FOUND
│   ├── AddressNotFoundException                ADDRESS_NOT_FOUND
│   ├── DeliveryZoneUnavailableException        DELIVERY_ZONE_UNAVAILABLE
│   ├── RestaurantClosedException               RESTAURANT_CLOSED
│   ├── InvalidTransitionException              INVALID_TRANSITION
│   └── StaleStatusException                    STALE_STATUS
├── InvalidOfferException                       OFFER_INVALID
├── PaymentException
│   ├── PaymentGatewayException                 PAYMENT_GATEWAY_ERROR
│   ├── PaymentTransactionNotFoundException      PAYMENT_NOT_FOUND
│   ├── InvalidPaymentAmountException           PAYMENT_AMOUNT_MISMATCH
│   └── InvalidOrderStateForPaymentException    PAYMENT_NOT_ALLOWED
└── RateLimitExceededException                  RATE_LIMITED

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The API layer turns them into JSON responses (see utils/error_handler.py):
    {"error": "ORDER_NOT_FOUND", "message": "Order 123 not found", "details": {"order_id": 123}}
"""

from .base import RestaurantException
from .cart import CartException, EmptyCartException, InvalidCartException
from .order import (
    OrderException,
    OrderNotFoundException,
    OrderOwnershipException,
    AddressNotFoundException,
    DeliveryZoneUnavailableException,
    RestaurantClosedException,
    InvalidTransitionException,
    StaleStatusException
)
from .offer import InvalidOfferException
from .payment import (
    PaymentException,
    PaymentGatewayException,
    PaymentTransactionNotFoundException,
    InvalidPaymentAmountException,
    InvalidOrderStateForPaymentException
)
from .rate_limit import RateLimitExceededException

__all__ = [
    # Base
    'RestaurantException',

    # Cart
    'CartException',
    'EmptyCartException',
    'InvalidCartException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'OrderOwnershipException',
    'AddressNotFoundException',
    'DeliveryZoneUnavailableException',
    'RestaurantClosedException',
    'InvalidTransitionException',
    'StaleStatusException',

    # Offer
    'InvalidOfferException',

    # Payment
    'PaymentException',
    'PaymentGatewayException',
    'PaymentTransactionNotFoundException',
    'InvalidPaymentAmountException',
    'InvalidOrderStateForPaymentException',

    # Rate limiting
    'RateLimitExceededException',
]
