from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Text, Numeric, func, CheckConstraint, Index, \
    Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from models.base import Base
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True)  # NULL for guest checkout
    address_id = Column(Integer, ForeignKey('addresses.id'), nullable=True)
    offer_id = Column(Integer, ForeignKey('offers.id', ondelete="SET NULL"), nullable=True)
    status = Column(SQLEnum(OrderStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
                    nullable=False, default=OrderStatus.PENDING_PAYMENT)

    # Price breakdown, always computed server-side at creation time
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_charge = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)

    # Snapshots
    delivery_address = Column(Text, nullable=True)
    offer_code = Column(String(50), nullable=True)
    special_instructions = Column(Text, nullable=True)

    # Payment
    payment_method = Column(String(20), nullable=False, default="upi")
    gateway_order_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime, nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    confirmed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan', lazy="selectin",
                         order_by='OrderItem.id')
    payment_transactions = relationship('PaymentTransaction', back_populates='order', cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('total_price >= 0', name='check_order_total_price_non_negative'),
        CheckConstraint('discount_amount >= 0', name='check_order_discount_non_negative'),
        Index('ix_orders_user_created', 'user_id', 'created_at'),
        Index('ix_orders_status', 'status'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    address_id: int | None = None
    offer_id: int | None = None
    status: OrderStatus | None = None
    subtotal: Decimal | None = None
    tax_amount: Decimal | None = None
    delivery_charge: Decimal | None = None
    discount_amount: Decimal | None = None
    total_price: Decimal | None = None
    currency: str | None = None
    delivery_address: str | None = None
    offer_code: str | None = None
    special_instructions: str | None = None
    payment_method: str | None = None
    gateway_order_id: str | None = None
    paid_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None


class OrderDetailsDTO(OrderDTO):
    """Order plus its item snapshots and presentation hints for clients."""
    items: list[OrderItemDTO] = []
    status_label: str | None = None
    status_color: str | None = None
    next_statuses: list[OrderStatus] = []
