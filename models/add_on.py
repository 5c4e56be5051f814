from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, CheckConstraint, UniqueConstraint

from models.base import Base


class AddOn(Base):
    __tablename__ = 'add_ons'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_add_on_price_non_negative'),
    )


# An add-on is offered for an item either directly or through the item's category
class ItemAddOn(Base):
    __tablename__ = 'item_add_ons'

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    add_on_id = Column(Integer, ForeignKey("add_ons.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('item_id', 'add_on_id', name='uq_item_add_on'),
    )


class CategoryAddOn(Base):
    __tablename__ = 'category_add_ons'

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    add_on_id = Column(Integer, ForeignKey("add_ons.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('category_id', 'add_on_id', name='uq_category_add_on'),
    )


class AddOnDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    price: Decimal | None = None
    is_available: bool | None = None
