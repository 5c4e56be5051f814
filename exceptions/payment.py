"""
Payment-related exceptions.
"""

from decimal import Decimal

from .base import RestaurantException


class PaymentException(RestaurantException):
    """Base exception for payment-related errors."""
    pass


class PaymentGatewayException(PaymentException):
    """
    Raised when the payment gateway rejects or fails a request.

    The order stays in pending_payment; initiation can be retried.
    """

    code = "PAYMENT_GATEWAY_ERROR"

    def __init__(self, message: str, order_id: int | None = None, status_code: int | None = None):
        super().__init__(
            f"Payment gateway error: {message}",
            details={'order_id': order_id, 'status_code': status_code}
        )
        self.order_id = order_id
        self.status_code = status_code


class PaymentTransactionNotFoundException(PaymentException):
    """Raised when a gateway callback references an unknown transaction."""

    code = "PAYMENT_NOT_FOUND"

    def __init__(self, gateway_order_id: str | None = None, client_txn_id: str | None = None):
        if gateway_order_id:
            message = f"Payment transaction {gateway_order_id} not found"
        elif client_txn_id:
            message = f"Payment transaction with client id {client_txn_id} not found"
        else:
            message = "Payment transaction not found"

        super().__init__(message, {'gateway_order_id': gateway_order_id, 'client_txn_id': client_txn_id})
        self.gateway_order_id = gateway_order_id
        self.client_txn_id = client_txn_id


class InvalidPaymentAmountException(PaymentException):
    """Raised when payment amount is invalid."""

    code = "PAYMENT_AMOUNT_MISMATCH"

    def __init__(self, expected: Decimal, received: Decimal, currency: str):
        super().__init__(
            f"Invalid payment amount: expected {expected} {currency}, received {received} {currency}",
            details={'expected': str(expected), 'received': str(received), 'currency': currency}
        )
        self.expected = expected
        self.received = received
        self.currency = currency


class InvalidOrderStateForPaymentException(PaymentException):
    """Raised when payment is requested for an order that is not awaiting payment."""

    code = "PAYMENT_NOT_ALLOWED"

    def __init__(self, order_id: int, current_status: str):
        super().__init__(
            f"Order {order_id} is '{current_status}' and cannot be paid",
            details={'order_id': order_id, 'current_status': current_status}
        )
        self.order_id = order_id
        self.current_status = current_status
