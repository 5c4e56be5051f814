from decimal import Decimal

from pydantic import BaseModel

from enums.order_event import OrderEventType
from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor


class OrderEventDTO(BaseModel):
    """Emitted after commit for the notification dispatcher."""
    event_type: OrderEventType
    order_id: int
    user_id: int | None = None
    from_status: OrderStatus | None = None
    to_status: OrderStatus | None = None
    actor: TransitionActor | None = None
    reason: str | None = None
    total_price: Decimal | None = None
    currency: str | None = None
