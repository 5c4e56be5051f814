"""
API router for the customer and staff ordering surface.

Identity is established upstream: the auth layer forwards the customer id
in the X-User-Id header (absent for guest checkout) and staff requests
carry the shared X-Staff-Token. Domain exceptions raised by the services
propagate to the handlers registered in utils.error_handler.

Security:
- Customers only ever see and act on their own orders
- Staff endpoints require a constant-time token match
- Order creation and payment initiation are rate limited per caller
"""

import hmac
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session, session_commit
from enums.order_status import OrderStatus
from enums.rate_limit_operation import RateLimitOperation
from exceptions.payment import PaymentGatewayException
from middleware.rate_limit import RateLimiter, get_redis
from models.cart import CreateOrderRequestDTO, QuoteRequestDTO
from services.notification import NotificationService
from services.order import OrderService
from services.payment import PaymentService
from services.restaurant import RestaurantStatusService
from utils.error_handler import build_error_body

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class StatusUpdateRequest(BaseModel):
    to_status: OrderStatus
    expected_status: OrderStatus | None = None
    reason: str | None = Field(None, max_length=500)


class ClosureRequest(BaseModel):
    reason: str | None = Field(None, max_length=255)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_session() as session:
        yield session


def get_rate_limiter() -> RateLimiter:
    return RateLimiter(get_redis())


def get_user_id(x_user_id: int | None = Header(None, alias="X-User-Id")) -> int | None:
    return x_user_id


def require_user_id(user_id: int | None = Depends(get_user_id)) -> int:
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in required")
    return user_id


def require_staff(x_staff_token: str | None = Header(None, alias="X-Staff-Token")) -> None:
    if not x_staff_token or not config.STAFF_API_TOKEN \
            or not hmac.compare_digest(x_staff_token, config.STAFF_API_TOKEN):
        logger.warning("Staff endpoint called without a valid X-Staff-Token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid staff token")


def rate_limit_subject(request: Request, user_id: int | None) -> str:
    # Guests have no id, so they share one limit per client address
    if user_id is not None:
        return f"user:{user_id}"
    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


@api_router.post("/cart/quote")
async def quote_cart(payload: QuoteRequestDTO,
                     user_id: int | None = Depends(get_user_id),
                     session: AsyncSession = Depends(get_session)):
    """Price the cart for display; rejected lines and offer problems are reported, not raised."""
    quote = await OrderService.quote(payload, user_id, session)
    return quote.model_dump(mode="json")


@api_router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(payload: CreateOrderRequestDTO,
                       request: Request,
                       user_id: int | None = Depends(get_user_id),
                       limiter: RateLimiter = Depends(get_rate_limiter),
                       session: AsyncSession = Depends(get_session)):
    """
    Create an order and start its payment.

    The order is committed before the gateway is contacted. If payment
    initiation fails the order stays in pending_payment and the response
    carries the payment error instead of an intent; a signed-in client retries via
    POST /api/orders/{id}/payment.

    Returns:
        201: {"order": {...}, "payment": {...} | null, "payment_error": {...} | null}
        400/404/409/422: Cart, address, offer or restaurant problems
        429: Too many orders
    """
    await limiter.enforce(RateLimitOperation.ORDER_CREATE, rate_limit_subject(request, user_id))

    order = await OrderService.create_order(payload, user_id)

    payment = None
    payment_error = None
    try:
        intent = await PaymentService.initiate(order.id, user_id, session, verify_owner=False)
        payment = intent.model_dump(mode="json")
    except PaymentGatewayException as e:
        logger.error(f"Payment initiation failed for new order {order.id}: {e.message}")
        payment_error = build_error_body(e)

    return {
        "order": order.model_dump(mode="json"),
        "payment": payment,
        "payment_error": payment_error,
    }


@api_router.get("/orders")
async def list_orders(user_id: int = Depends(require_user_id),
                      limit: int = Query(20, ge=1, le=100),
                      offset: int = Query(0, ge=0),
                      session: AsyncSession = Depends(get_session)):
    orders = await OrderService.get_orders(user_id, limit, offset, session)
    return [order.model_dump(mode="json") for order in orders]


@api_router.get("/orders/{order_id}")
async def get_order(order_id: int,
                    user_id: int | None = Depends(get_user_id),
                    session: AsyncSession = Depends(get_session)):
    order = await OrderService.get_order(order_id, user_id, session)
    return order.model_dump(mode="json")


@api_router.post("/orders/{order_id}/cancel")
async def cancel_order(order_id: int,
                       payload: CancelOrderRequest | None = None,
                       user_id: int | None = Depends(get_user_id),
                       session: AsyncSession = Depends(get_session)):
    """Customer cancellation, allowed only before payment completes."""
    reason = payload.reason if payload is not None else None
    order = await OrderService.cancel_order(order_id, user_id, reason or "Cancelled by customer", session)
    return order.model_dump(mode="json")


@api_router.post("/orders/{order_id}/payment")
async def retry_payment(order_id: int,
                        request: Request,
                        user_id: int | None = Depends(get_user_id),
                        limiter: RateLimiter = Depends(get_rate_limiter),
                        session: AsyncSession = Depends(get_session)):
    await limiter.enforce(RateLimitOperation.PAYMENT_INITIATE, rate_limit_subject(request, user_id))
    intent = await PaymentService.initiate(order_id, user_id, session)
    return intent.model_dump(mode="json")


@api_router.get("/notifications")
async def list_notifications(user_id: int = Depends(require_user_id),
                             limit: int = Query(50, ge=1, le=200),
                             offset: int = Query(0, ge=0),
                             session: AsyncSession = Depends(get_session)):
    notifications = await NotificationService.get_notifications(user_id, limit, offset, session)
    return [notification.model_dump(mode="json") for notification in notifications]


@api_router.get("/restaurant/status")
async def restaurant_status(session: AsyncSession = Depends(get_session)):
    restaurant = await RestaurantStatusService.is_open(session)
    return restaurant.model_dump(mode="json")


@admin_router.get("/orders", dependencies=[Depends(require_staff)])
async def admin_list_orders(order_status: OrderStatus | None = Query(None, alias="status"),
                            limit: int = Query(50, ge=1, le=200),
                            offset: int = Query(0, ge=0),
                            session: AsyncSession = Depends(get_session)):
    orders = await OrderService.get_all_orders(order_status, limit, offset, session)
    return [order.model_dump(mode="json") for order in orders]


@admin_router.get("/orders/{order_id}", dependencies=[Depends(require_staff)])
async def admin_get_order(order_id: int, session: AsyncSession = Depends(get_session)):
    order = await OrderService.get_order_for_staff(order_id, session)
    return order.model_dump(mode="json")


@admin_router.patch("/orders/{order_id}/status", dependencies=[Depends(require_staff)])
async def admin_update_status(order_id: int,
                              payload: StatusUpdateRequest,
                              staff_user_id: int | None = Depends(get_user_id),
                              session: AsyncSession = Depends(get_session)):
    """
    Move an order along the kitchen/delivery flow.

    Passing expected_status makes the update conditional: if another staff
    member changed the order first the call fails with 409 STALE_STATUS
    and the current status in the details.
    """
    await OrderService.update_status_by_staff(order_id, payload.to_status, session,
                                              expected_status=payload.expected_status,
                                              staff_user_id=staff_user_id,
                                              reason=payload.reason)
    order = await OrderService.get_order_for_staff(order_id, session)
    return order.model_dump(mode="json")


@admin_router.post("/restaurant/close", dependencies=[Depends(require_staff)])
async def admin_close_restaurant(payload: ClosureRequest | None = None,
                                 session: AsyncSession = Depends(get_session)):
    await RestaurantStatusService.close(payload.reason if payload is not None else None, session)
    await session_commit(session)
    RestaurantStatusService.invalidate_cache()
    restaurant = await RestaurantStatusService.is_open(session)
    return restaurant.model_dump(mode="json")


@admin_router.post("/restaurant/open", dependencies=[Depends(require_staff)])
async def admin_open_restaurant(session: AsyncSession = Depends(get_session)):
    await RestaurantStatusService.open(session)
    await session_commit(session)
    RestaurantStatusService.invalidate_cache()
    restaurant = await RestaurantStatusService.is_open(session)
    return restaurant.model_dump(mode="json")
