from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base import Base


# Snapshot rows: copied from the catalog at order time and never joined back to it
class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_order_item_quantity_positive'),
        CheckConstraint('base_price >= 0', name='ck_order_item_base_price_non_negative'),
        Index('ix_order_items_order_id', 'order_id'),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, nullable=True)  # reference only, no FK: catalog rows may be deleted later
    size_id = Column(Integer, nullable=True)
    category_name = Column(String(100), nullable=True)
    item_name = Column(String(255), nullable=False)
    size = Column(String(50), nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    line_total = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    add_ons = relationship("OrderItemAddOn", back_populates="order_item", cascade="all, delete-orphan",
                           lazy="selectin", order_by="OrderItemAddOn.id")


class OrderItemAddOn(Base):
    __tablename__ = 'order_item_add_ons'

    id = Column(Integer, primary_key=True)
    order_item_id = Column(Integer, ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False)
    add_on_id = Column(Integer, nullable=True)
    add_on_name = Column(String(100), nullable=False)
    add_on_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    order_item = relationship("OrderItem", back_populates="add_ons")


class OrderItemAddOnDTO(BaseModel):
    id: int | None = None
    order_item_id: int | None = None
    add_on_id: int | None = None
    add_on_name: str | None = None
    add_on_price: Decimal | None = None
    quantity: int | None = None


class OrderItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    item_id: int | None = None
    size_id: int | None = None
    category_name: str | None = None
    item_name: str | None = None
    size: str | None = None
    base_price: Decimal | None = None
    quantity: int | None = None
    tax_rate: Decimal | None = None
    tax_amount: Decimal | None = None
    line_total: Decimal | None = None
    add_ons: list[OrderItemAddOnDTO] = []
