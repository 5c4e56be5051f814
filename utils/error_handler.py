"""
Error Handler Utility for the HTTP API

Provides centralized error handling for API endpoints with:
- Stable machine-readable error codes
- Consistent JSON error bodies
- Automatic exception to HTTP status mapping
- Logging for debugging

Usage in app setup:
    from utils.error_handler import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

Response body:
    {"error": "STALE_STATUS", "message": "Order 7 is no longer 'confirmed'", "details": {...}}
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from exceptions import (
    RestaurantException,
    EmptyCartException,
    InvalidCartException,
    OrderNotFoundException,
    AddressNotFoundException,
    DeliveryZoneUnavailableException,
    RestaurantClosedException,
    InvalidTransitionException,
    StaleStatusException,
    InvalidOfferException,
    PaymentGatewayException,
    PaymentTransactionNotFoundException,
    InvalidPaymentAmountException,
    InvalidOrderStateForPaymentException,
    RateLimitExceededException,
)

# Map exception types to HTTP status codes
ERROR_STATUS_MAPPING: dict[type[RestaurantException], int] = {
    # Cart exceptions
    EmptyCartException: 400,
    InvalidCartException: 422,

    # Order exceptions
    OrderNotFoundException: 404,
    AddressNotFoundException: 404,
    DeliveryZoneUnavailableException: 422,
    RestaurantClosedException: 409,
    InvalidTransitionException: 409,
    StaleStatusException: 409,

    # Offer exceptions
    InvalidOfferException: 422,

    # Payment exceptions
    PaymentGatewayException: 502,
    PaymentTransactionNotFoundException: 404,
    InvalidPaymentAmountException: 422,
    InvalidOrderStateForPaymentException: 409,

    # Rate limiting
    RateLimitExceededException: 429,
}


def get_status_code(exception: RestaurantException) -> int:
    """
    HTTP status for a domain exception.

    Subclasses inherit the status of the closest mapped parent
    (e.g. OrderOwnershipException is reported like OrderNotFoundException).
    """
    for exception_type in type(exception).__mro__:
        if exception_type in ERROR_STATUS_MAPPING:
            return ERROR_STATUS_MAPPING[exception_type]
    logging.error(f"Unmapped exception type: {type(exception).__name__}")
    return 400


def build_error_body(exception: RestaurantException) -> dict:
    return {
        "error": exception.code,
        "message": exception.message,
        "details": exception.details,
    }


def handle_service_error(exception: RestaurantException) -> JSONResponse:
    """
    Convert service exception to a JSON error response.

    Example:
        try:
            order = await OrderService.get_order(123, user_id, session)
        except OrderNotFoundException as e:
            return handle_service_error(e)
    """
    status_code = get_status_code(exception)
    if status_code >= 500:
        logging.error(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    else:
        logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    return JSONResponse(status_code=status_code, content=build_error_body(exception))


def handle_unexpected_error(exception: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions (non-RestaurantException).

    Logs the full traceback under a correlation id that is also returned
    to the client, so support can find the log entry.
    """
    correlation_id = uuid.uuid4().hex[:12]
    logging.error(f"Unexpected error [{correlation_id}]: {type(exception).__name__} - {str(exception)}",
                  exc_info=exception)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {"correlation_id": correlation_id},
        }
    )


def register_exception_handlers(app: FastAPI):
    async def restaurant_exception_handler(request: Request, exc: RestaurantException):
        return handle_service_error(exc)

    async def unexpected_exception_handler(request: Request, exc: Exception):
        return handle_unexpected_error(exc)

    app.add_exception_handler(RestaurantException, restaurant_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
