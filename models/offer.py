from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Numeric, CheckConstraint, \
    Enum as SQLEnum, func

from enums.discount_type import DiscountType
from models.base import Base


class Offer(Base):
    __tablename__ = 'offers'

    id = Column(Integer, primary_key=True, unique=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    discount_type = Column(SQLEnum(DiscountType, values_callable=lambda e: [m.value for m in e], native_enum=False),
                           nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=True)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)  # caps percentage discounts
    min_order_value = Column(Numeric(10, 2), nullable=True)
    applicable_category_id = Column(Integer, ForeignKey('categories.id', ondelete="SET NULL"), nullable=True)
    applicable_item_id = Column(Integer, ForeignKey('items.id', ondelete="SET NULL"), nullable=True)
    first_order_only = Column(Boolean, nullable=False, default=False)
    max_uses_per_user = Column(Integer, nullable=True)
    valid_from = Column(DateTime, nullable=True)
    valid_to = Column(DateTime, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('discount_value IS NULL OR discount_value >= 0', name='check_offer_discount_value'),
        CheckConstraint('max_discount_amount IS NULL OR max_discount_amount >= 0', name='check_offer_max_discount'),
        CheckConstraint('min_order_value IS NULL OR min_order_value >= 0', name='check_offer_min_order'),
        CheckConstraint('max_uses_per_user IS NULL OR max_uses_per_user > 0', name='check_offer_max_uses'),
    )


class OfferDTO(BaseModel):
    id: int | None = None
    code: str | None = None
    title: str | None = None
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = None
    max_discount_amount: Decimal | None = None
    min_order_value: Decimal | None = None
    applicable_category_id: int | None = None
    applicable_item_id: int | None = None
    first_order_only: bool = False
    max_uses_per_user: int | None = None
    valid_from: datetime | None = None
    valid_to: datetime | None = None
    is_active: bool = True


class OfferUsageDTO(BaseModel):
    """Order history of one user, as far as offer eligibility is concerned."""
    user_id: int | None = None
    prior_order_count: int = 0  # non-cancelled orders
    offer_use_count: int = 0  # non-cancelled orders that used the evaluated offer
