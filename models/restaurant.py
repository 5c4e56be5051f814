from datetime import datetime, time
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Date, Time, Numeric, CheckConstraint, func

from models.base import Base


class RestaurantSettings(Base):
    """Single-row table holding the manual open/closed switch and the default delivery fee."""
    __tablename__ = 'restaurant_settings'

    id = Column(Integer, primary_key=True)
    is_manually_closed = Column(Boolean, nullable=False, default=False)
    manual_closure_reason = Column(Text, nullable=True)
    delivery_fee = Column(Numeric(10, 2), nullable=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class OperatingHours(Base):
    __tablename__ = 'operating_hours'

    id = Column(Integer, primary_key=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Monday ... 6 = Sunday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_operating_hours_day_of_week'),
    )


class Holiday(Base):
    __tablename__ = 'holidays'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, unique=True)
    name = Column(String(100), nullable=False)


class RestaurantSettingsDTO(BaseModel):
    id: int | None = None
    is_manually_closed: bool = False
    manual_closure_reason: str | None = None
    delivery_fee: Decimal | None = None


class OperatingHoursDTO(BaseModel):
    id: int | None = None
    day_of_week: int
    open_time: time
    close_time: time
    is_closed: bool = False


class RestaurantStatusDTO(BaseModel):
    is_open: bool
    reason: str | None = None
    next_open_time: datetime | None = None
