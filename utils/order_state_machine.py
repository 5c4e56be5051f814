"""
Order State Machine for validating order status transitions.

The transition table is plain data: every legal (from, to) pair lists the
actors allowed to perform it. Handlers never compare statuses themselves,
they ask this module.

Valid status transitions:
- PENDING_PAYMENT -> CONFIRMED (payment callback, or staff for cash/manual orders)
- PENDING_PAYMENT -> CANCELLED (customer, payment failure callback, or staff)
- CONFIRMED -> PREPARING -> READY -> OUT_FOR_DELIVERY -> COMPLETED (staff only, strictly sequential)
- CONFIRMED / PREPARING / READY / OUT_FOR_DELIVERY -> CANCELLED (staff only)

COMPLETED and CANCELLED are final.
"""

import logging
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus,
                 actors: FrozenSet[TransitionActor], description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.actors = actors
        self.description = description

    def __repr__(self):
        actors = ",".join(sorted(actor.value for actor in self.actors))
        return f"{self.from_status.value} -> {self.to_status.value} ({actors})"


_STAFF = frozenset({TransitionActor.STAFF})


class OrderStateMachine:
    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # From PENDING_PAYMENT
        OrderStatusTransition(
            OrderStatus.PENDING_PAYMENT,
            OrderStatus.CONFIRMED,
            frozenset({TransitionActor.PAYMENT_GATEWAY, TransitionActor.STAFF}),
            description="Payment received, or order accepted manually by staff"
        ),
        OrderStatusTransition(
            OrderStatus.PENDING_PAYMENT,
            OrderStatus.CANCELLED,
            frozenset({TransitionActor.CUSTOMER, TransitionActor.PAYMENT_GATEWAY, TransitionActor.STAFF}),
            description="Cancelled before payment, or payment failed"
        ),

        # Kitchen / delivery flow
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.PREPARING, _STAFF,
                              description="Kitchen started preparing"),
        OrderStatusTransition(OrderStatus.PREPARING, OrderStatus.READY, _STAFF,
                              description="Order packed"),
        OrderStatusTransition(OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY, _STAFF,
                              description="Handed to rider"),
        OrderStatusTransition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.COMPLETED, _STAFF,
                              description="Delivered"),

        # Operational cancellation after payment
        OrderStatusTransition(OrderStatus.CONFIRMED, OrderStatus.CANCELLED, _STAFF,
                              description="Cancelled by staff after confirmation"),
        OrderStatusTransition(OrderStatus.PREPARING, OrderStatus.CANCELLED, _STAFF,
                              description="Cancelled by staff during preparation"),
        OrderStatusTransition(OrderStatus.READY, OrderStatus.CANCELLED, _STAFF,
                              description="Cancelled by staff before dispatch"),
        OrderStatusTransition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED, _STAFF,
                              description="Cancelled by staff during delivery"),
    ]

    FINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

    # Build transition map for fast lookup
    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _transition_actors: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[TransitionActor]] = {}
    _transition_descriptions: Dict[Tuple[OrderStatus, OrderStatus], str] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            key = (transition.from_status, transition.to_status)
            cls._transition_actors[key] = transition.actors
            cls._transition_descriptions[key] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus,
                            actor: Optional[TransitionActor] = None) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Args:
            from_status: Current order status
            to_status: Desired new status
            actor: Who performs the transition; None checks the table only

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()

        if to_status not in cls._transition_map.get(from_status, set()):
            return False
        if actor is None:
            return True
        return actor in cls._transition_actors[(from_status, to_status)]

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus,
                              actor: Optional[TransitionActor] = None) -> List[OrderStatus]:
        """Next statuses reachable from from_status, optionally only those the actor may perform."""
        cls._build_transition_map()
        destinations = cls._transition_map.get(from_status, set())
        allowed = [to_status for to_status in destinations
                   if actor is None or actor in cls._transition_actors[(from_status, to_status)]]
        # Stable order for clients: forward flow first, cancellation last
        return sorted(allowed, key=lambda status: list(OrderStatus).index(status))

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return status in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus,
                                    actor: TransitionActor, actor_id: Optional[int] = None) -> bool:
        """
        Validate a status transition for the given actor and write an audit log line.

        Returns:
            True if the transition is allowed, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: "
                         f"{from_status.value} -> {to_status.value}")
            return False

        if not cls.is_valid_transition(from_status, to_status, actor):
            logger.error(f"Actor {actor.value} may not perform {from_status.value} -> {to_status.value} "
                         f"on order {order_id}")
            return False

        performer = f"{actor.value} {actor_id}" if actor_id is not None else actor.value
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}: {cls.get_transition_description(from_status, to_status)}")
        return True


# Single source for status presentation so clients don't keep their own copies
STATUS_PRESENTATION: Dict[OrderStatus, Tuple[str, str]] = {
    OrderStatus.PENDING_PAYMENT: ("Pending Payment", "#B00020"),
    OrderStatus.CONFIRMED: ("Confirmed", "#6200EE"),
    OrderStatus.PREPARING: ("Preparing", "#FF9800"),
    OrderStatus.READY: ("Ready", "#009688"),
    OrderStatus.OUT_FOR_DELIVERY: ("Out for Delivery", "#2196F3"),
    OrderStatus.COMPLETED: ("Completed", "#4CAF50"),
    OrderStatus.CANCELLED: ("Cancelled", "#757575"),
}


def get_status_label(status: OrderStatus) -> str:
    return STATUS_PRESENTATION[status][0]


def get_status_color(status: OrderStatus) -> str:
    return STATUS_PRESENTATION[status][1]


def get_next_valid_statuses(current_status: OrderStatus,
                            actor: Optional[TransitionActor] = None) -> List[OrderStatus]:
    return OrderStateMachine.get_valid_transitions(current_status, actor)
