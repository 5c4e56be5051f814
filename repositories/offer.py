from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from enums.order_status import OrderStatus
from models.offer import Offer, OfferDTO, OfferUsageDTO
from models.order import Order


class OfferRepository:

    @staticmethod
    async def get_by_code(code: str, session: Session | AsyncSession) -> OfferDTO | None:
        # codes are stored upper-case
        stmt = select(Offer).where(Offer.code == code.strip().upper())
        offer = (await session_execute(stmt, session)).scalar()
        if offer is None:
            return None
        return OfferDTO.model_validate(offer, from_attributes=True)

    @staticmethod
    async def get_usage(user_id: int | None, offer_id: int | None, session: Session | AsyncSession) -> OfferUsageDTO:
        """
        Order history relevant for first-order-only and per-user limits.

        An order counts as long as it is not cancelled, including orders still awaiting payment.
        """
        if user_id is None:
            return OfferUsageDTO(user_id=None)

        not_cancelled = (Order.user_id == user_id, Order.status != OrderStatus.CANCELLED)
        prior_stmt = select(func.count(Order.id)).where(*not_cancelled)
        prior_order_count = (await session_execute(prior_stmt, session)).scalar_one()

        offer_use_count = 0
        if offer_id is not None:
            usage_stmt = select(func.count(Order.id)).where(*not_cancelled, Order.offer_id == offer_id)
            offer_use_count = (await session_execute(usage_stmt, session)).scalar_one()

        return OfferUsageDTO(user_id=user_id,
                             prior_order_count=prior_order_count,
                             offer_use_count=offer_use_count)
