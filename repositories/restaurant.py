from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.restaurant import RestaurantSettings, RestaurantSettingsDTO, OperatingHours, OperatingHoursDTO, Holiday


class RestaurantRepository:

    @staticmethod
    async def get_settings(session: Session | AsyncSession) -> RestaurantSettingsDTO:
        stmt = select(RestaurantSettings).order_by(RestaurantSettings.id).limit(1)
        settings = (await session_execute(stmt, session)).scalar()
        if settings is None:
            return RestaurantSettingsDTO()
        return RestaurantSettingsDTO.model_validate(settings, from_attributes=True)

    @staticmethod
    async def set_manual_closure(is_closed: bool, reason: str | None, session: Session | AsyncSession):
        stmt = select(RestaurantSettings).order_by(RestaurantSettings.id).limit(1)
        settings = (await session_execute(stmt, session)).scalar()
        if settings is None:
            settings = RestaurantSettings()
            session.add(settings)
        settings.is_manually_closed = is_closed
        settings.manual_closure_reason = reason if is_closed else None
        await session_flush(session)

    @staticmethod
    async def get_operating_hours(session: Session | AsyncSession) -> list[OperatingHoursDTO]:
        stmt = select(OperatingHours).order_by(OperatingHours.day_of_week, OperatingHours.open_time)
        hours = (await session_execute(stmt, session)).scalars().all()
        return [OperatingHoursDTO.model_validate(slot, from_attributes=True) for slot in hours]

    @staticmethod
    async def get_holidays(start: date, end: date, session: Session | AsyncSession) -> dict[date, str]:
        """Holidays between start and end (inclusive), keyed by date."""
        stmt = select(Holiday.date, Holiday.name).where(Holiday.date >= start, Holiday.date <= end)
        return {holiday_date: name for holiday_date, name in (await session_execute(stmt, session)).all()}
