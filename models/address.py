from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from models.base import Base
from models.location import DeliveryZoneDTO


class Address(Base):
    __tablename__ = 'addresses'

    id = Column(Integer, primary_key=True, unique=True)
    # NULL for addresses captured during guest checkout
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=True)
    label = Column(String(50), nullable=True)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=True)
    postal_code = Column(String(10), nullable=True)
    country = Column(String(100), nullable=False, default="India")
    landmark = Column(String(255), nullable=True)
    location_id = Column(Integer, ForeignKey('locations.id', ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now())

    location = relationship("Location", lazy="joined")


class AddressDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    label: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    landmark: str | None = None
    location_id: int | None = None
    delivery_zone: DeliveryZoneDTO | None = None
    created_at: datetime | None = None

    def format_for_delivery(self) -> str:
        """Single-line address snapshot stored on the order."""
        text = self.address_line1 or ""
        if self.address_line2:
            text += f", {self.address_line2}"
        text += f", {self.city}"
        if self.state:
            text += f", {self.state}"
        if self.postal_code:
            text += f" - {self.postal_code}"
        if self.country:
            text += f", {self.country}"
        if self.landmark:
            text += f" (Near: {self.landmark})"
        return text
