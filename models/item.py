from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base


class Item(Base):
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True, unique=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    category = relationship("Category", lazy="joined")
    name = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    sizes = relationship("ItemSize", back_populates="item", cascade="all, delete-orphan")


class ItemSize(Base):
    __tablename__ = 'item_sizes'

    id = Column(Integer, primary_key=True, unique=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)  # e.g. "Half", "Full", "Regular"
    price = Column(Numeric(10, 2), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    item = relationship("Item", back_populates="sizes")

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_item_size_price_non_negative'),
    )


class ItemSizeDTO(BaseModel):
    id: int | None = None
    item_id: int | None = None
    name: str | None = None
    price: Decimal | None = None
    is_available: bool | None = None


class ItemDTO(BaseModel):
    id: int | None = None
    category_id: int | None = None
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_available: bool | None = None
