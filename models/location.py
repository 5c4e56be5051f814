from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Boolean, Numeric, CheckConstraint

from models.base import Base


# Delivery zone: charge and ETA for one serviceable area
class Location(Base):
    __tablename__ = 'locations'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String(100), nullable=False)
    area = Column(String(100), nullable=True)
    city = Column(String(100), nullable=False)
    pincode = Column(String(10), nullable=True)
    delivery_charge = Column(Numeric(10, 2), nullable=False, default=0)
    estimated_delivery_time = Column(Integer, nullable=True)  # minutes
    is_available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint('delivery_charge >= 0', name='check_location_delivery_charge_non_negative'),
    )


class DeliveryZoneDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    delivery_charge: Decimal = Decimal("0.00")
    estimated_delivery_time: int | None = None
    is_available: bool = True
