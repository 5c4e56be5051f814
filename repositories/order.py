import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO, OrderDetailsDTO
from models.orderItem import OrderItem, OrderItemAddOn, OrderItemDTO

logger = logging.getLogger(__name__)


class OrderRepository:

    @staticmethod
    async def create(order_dto: OrderDTO, order_items: list[OrderItemDTO], session: Session | AsyncSession) -> int:
        """
        Insert the order with its item and add-on snapshots. Flushes, never commits.
        """
        order = Order(**order_dto.model_dump(exclude_none=True))
        for item_dto in order_items:
            order_item = OrderItem(**item_dto.model_dump(exclude={'id', 'order_id', 'add_ons'}, exclude_none=True))
            order_item.add_ons = [
                OrderItemAddOn(**add_on.model_dump(exclude={'id', 'order_item_id'}, exclude_none=True))
                for add_on in item_dto.add_ons
            ]
            order.items.append(order_item)
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_by_id(order_id: int, session: Session | AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = (await session_execute(stmt, session)).scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_details(order_id: int, session: Session | AsyncSession) -> OrderDetailsDTO | None:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = (await session_execute(stmt, session)).scalar()
        if order is None:
            return None
        return OrderDetailsDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_status(order_id: int, session: Session | AsyncSession) -> OrderStatus | None:
        stmt = select(Order.status).where(Order.id == order_id)
        return (await session_execute(stmt, session)).scalar()

    @staticmethod
    async def get_by_user_id(user_id: int, limit: int, offset: int,
                             session: Session | AsyncSession) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .limit(limit)
                .offset(offset))
        orders = (await session_execute(stmt, session)).scalars().all()
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders]

    @staticmethod
    async def get_all(status: OrderStatus | None, limit: int, offset: int,
                      session: Session | AsyncSession) -> list[OrderDTO]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).offset(offset)
        orders = (await session_execute(stmt, session)).scalars().all()
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders]

    @staticmethod
    async def compare_and_set_status(order_id: int,
                                     from_status: OrderStatus,
                                     to_status: OrderStatus,
                                     session: Session | AsyncSession,
                                     **values) -> bool:
        """
        Optimistic status update: writes only if the row still has from_status.

        Returns:
            True if exactly one row was updated, False if another writer got there first
        """
        stmt = (update(Order)
                .where(Order.id == order_id, Order.status == from_status)
                .values(status=to_status, updated_at=datetime.utcnow(), **values)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        if result.rowcount != 1:
            logger.warning(f"Optimistic status update lost for order {order_id}: "
                           f"expected {from_status.value}, rowcount={result.rowcount}")
            return False
        return True

    @staticmethod
    async def set_gateway_order_id(order_id: int, gateway_order_id: str, session: Session | AsyncSession):
        stmt = update(Order).where(Order.id == order_id).values(gateway_order_id=gateway_order_id)
        await session_execute(stmt, session)
