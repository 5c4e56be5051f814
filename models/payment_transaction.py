from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Numeric, func, Index, \
    Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.payment_status import PaymentTransactionStatus
from models.base import Base


class PaymentTransaction(Base):
    __tablename__ = 'payment_transactions'

    id = Column(Integer, primary_key=True, unique=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    client_txn_id = Column(String(100), nullable=False, unique=True)
    gateway_order_id = Column(String(255), nullable=True, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(SQLEnum(PaymentTransactionStatus, values_callable=lambda e: [m.value for m in e],
                            native_enum=False),
                    nullable=False, default=PaymentTransactionStatus.PENDING)
    payment_method = Column(String(20), nullable=False, default="upi")
    qr_string = Column(Text, nullable=True)
    payment_url = Column(Text, nullable=True)
    upi_txn_id = Column(String(100), nullable=True)
    failure_reason = Column(Text, nullable=True)
    # Set when the gateway confirms a payment for an order that was already cancelled
    requires_refund = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime, nullable=True)

    order = relationship('Order', back_populates='payment_transactions')

    __table_args__ = (
        Index('ix_payment_transactions_order_status', 'order_id', 'status'),
    )


class PaymentTransactionDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    client_txn_id: str | None = None
    gateway_order_id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    status: PaymentTransactionStatus | None = None
    payment_method: str | None = None
    qr_string: str | None = None
    payment_url: str | None = None
    upi_txn_id: str | None = None
    failure_reason: str | None = None
    requires_refund: bool = False
    created_at: datetime | None = None
    completed_at: datetime | None = None


class PaymentIntentDTO(BaseModel):
    order_id: int
    gateway_order_id: str
    client_txn_id: str
    amount: Decimal
    currency: str
    qr_string: str | None = None
    payment_url: str | None = None


class PaymentWebhookDTO(BaseModel):
    """Inbound gateway callback; only the fields the order flow acts on."""
    gateway_order_id: str | None = None
    client_txn_id: str | None = None
    status: str
    amount: Decimal | None = None
    upi_txn_id: str | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status.lower() in ("success", "succeeded", "completed")
