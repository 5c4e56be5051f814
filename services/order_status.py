import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from enums.order_event import OrderEventType
from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor
from exceptions.order import (
    InvalidTransitionException,
    OrderNotFoundException,
    OrderOwnershipException,
    StaleStatusException,
)
from models.order import OrderDTO
from models.order_event import OrderEventDTO
from repositories.order import OrderRepository
from services.notification import NotificationService
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)

# Timestamp column stamped when an order enters the status
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


class OrderStatusService:
    """Order State Machine enforcement on top of the transition table."""

    @staticmethod
    async def apply_transition(order_id: int,
                               to_status: OrderStatus,
                               actor: TransitionActor,
                               session: Session | AsyncSession,
                               expected_status: OrderStatus | None = None,
                               actor_user_id: int | None = None,
                               reason: str | None = None,
                               extra_values: dict | None = None) -> OrderEventDTO | None:
        """
        Validate and write a status change without committing.

        The write is a compare-and-set on the status read here (or on
        expected_status when the caller saw a specific status), so a
        concurrent writer can never be silently overwritten.

        Args:
            order_id: Order to move
            to_status: Target status
            actor: Who asks for the change; checked against the transition table
            session: Database session (caller commits)
            expected_status: Status the caller based its decision on
            actor_user_id: Customer or staff user id, for ownership and audit
            reason: Cancellation reason, stored on the order
            extra_values: Additional Order columns to write with the status

        Returns:
            The event to emit after commit, or None for a repeated gateway callback
            on an order that already has to_status

        Raises:
            OrderNotFoundException: Unknown order, or customer is not the owner
            StaleStatusException: Status differs from expected_status or changed concurrently
            InvalidTransitionException: Transition not allowed for this actor, including a
                staff or customer request for the status the order already has
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if actor == TransitionActor.CUSTOMER and (actor_user_id is None or order.user_id != actor_user_id):
            raise OrderOwnershipException(order_id, actor_user_id)

        current_status = order.status
        if expected_status is not None and current_status != expected_status:
            raise StaleStatusException(order_id, expected_status.value, current_status.value)

        if current_status == to_status and actor == TransitionActor.PAYMENT_GATEWAY:
            logger.info(f"Order {order_id} already {to_status.value}, nothing to do")
            return None

        if not OrderStateMachine.validate_and_log_transition(order_id, current_status, to_status,
                                                             actor, actor_user_id):
            raise InvalidTransitionException(order_id, current_status.value, to_status.value, actor.value)

        values = dict(extra_values or {})
        timestamp_column = _STATUS_TIMESTAMPS.get(to_status)
        if timestamp_column is not None:
            values.setdefault(timestamp_column, datetime.utcnow())
        if to_status == OrderStatus.CANCELLED and reason:
            values["cancellation_reason"] = reason

        updated = await OrderRepository.compare_and_set_status(order_id, current_status, to_status, session,
                                                               **values)
        if not updated:
            latest_status = await OrderRepository.get_status(order_id, session)
            raise StaleStatusException(order_id, current_status.value,
                                       latest_status.value if latest_status else None)

        return OrderEventDTO(
            event_type=OrderEventType.ORDER_STATUS_CHANGED,
            order_id=order_id,
            user_id=order.user_id,
            from_status=current_status,
            to_status=to_status,
            actor=actor,
            reason=reason,
            total_price=order.total_price,
            currency=order.currency,
        )

    @staticmethod
    async def transition(order_id: int,
                         to_status: OrderStatus,
                         actor: TransitionActor,
                         session: Session | AsyncSession,
                         expected_status: OrderStatus | None = None,
                         actor_user_id: int | None = None,
                         reason: str | None = None) -> OrderDTO:
        """
        Change status, commit, then notify. Returns the order as stored after the change.
        """
        event = await OrderStatusService.apply_transition(order_id, to_status, actor, session,
                                                          expected_status=expected_status,
                                                          actor_user_id=actor_user_id,
                                                          reason=reason)
        await session_commit(session)
        if event is not None:
            NotificationService.emit(event)
        return await OrderRepository.get_by_id(order_id, session)
