from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Integer, Column, String, Boolean, Numeric, CheckConstraint

from models.base import Base


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String(100), nullable=False, unique=True)
    # GST percentage applied to every line of this category (e.g. 5.00 = 5%)
    tax_rate = Column(Numeric(5, 2), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint('tax_rate IS NULL OR (tax_rate >= 0 AND tax_rate <= 100)', name='check_category_tax_rate_range'),
    )


class CategoryDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    tax_rate: Decimal | None = None
    is_available: bool | None = None
