"""
Order-related exceptions.
"""

from datetime import datetime

from .base import RestaurantException


class OrderException(RestaurantException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class OrderOwnershipException(OrderNotFoundException):
    """
    Raised when user attempts to access/modify order they don't own.

    Reported to clients exactly like a missing order.
    """

    def __init__(self, order_id: int, user_id: int | None):
        super().__init__(order_id)
        self.user_id = user_id


class AddressNotFoundException(OrderException):
    """Raised when the delivery address is missing or belongs to someone else."""

    code = "ADDRESS_NOT_FOUND"

    def __init__(self, address_id: int):
        super().__init__(
            f"Address {address_id} not found",
            details={'address_id': address_id}
        )
        self.address_id = address_id


class DeliveryZoneUnavailableException(OrderException):
    code = "DELIVERY_ZONE_UNAVAILABLE"

    def __init__(self, location_id: int, name: str | None = None):
        super().__init__(
            f"We are not delivering to {name or 'this area'} right now",
            details={'location_id': location_id}
        )
        self.location_id = location_id


class RestaurantClosedException(OrderException):
    """Raised when an order is placed while the restaurant is not accepting orders."""

    code = "RESTAURANT_CLOSED"

    def __init__(self, reason: str | None, next_open_time: datetime | None = None):
        super().__init__(
            reason or "Restaurant is currently closed",
            details={
                'reason': reason,
                'next_open_time': next_open_time.isoformat() if next_open_time else None,
            }
        )
        self.reason = reason
        self.next_open_time = next_open_time


class InvalidTransitionException(OrderException):
    """Raised when a status change is not in the transition table for the acting party."""

    code = "INVALID_TRANSITION"

    def __init__(self, order_id: int, from_status: str, to_status: str, actor: str):
        super().__init__(
            f"Order {order_id} cannot move from '{from_status}' to '{to_status}'",
            details={'order_id': order_id, 'from_status': from_status, 'to_status': to_status, 'actor': actor}
        )
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status


class StaleStatusException(OrderException):
    """Raised when the order status changed between read and write. Caller must refetch."""

    code = "STALE_STATUS"

    def __init__(self, order_id: int, expected_status: str, current_status: str | None = None):
        super().__init__(
            f"Order {order_id} is no longer '{expected_status}'",
            details={'order_id': order_id, 'expected_status': expected_status, 'current_status': current_status}
        )
        self.order_id = order_id
        self.expected_status = expected_status
        self.current_status = current_status
