import logging
import time as time_module
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from models.restaurant import OperatingHoursDTO, RestaurantStatusDTO
from repositories.restaurant import RestaurantRepository

logger = logging.getLogger(__name__)


class RestaurantStatusService:
    """
    Open/closed capability.

    Precedence: manual closure, then holiday, then today's operating-hour slots,
    all evaluated in RESTAURANT_TIMEZONE. The answer is cached in-process for
    RESTAURANT_STATUS_TTL_SECONDS so checkout bursts don't hit the database.
    """

    _cached_status: RestaurantStatusDTO | None = None
    _cached_at: float = 0.0

    @staticmethod
    def now() -> datetime:
        return datetime.now(ZoneInfo(config.RESTAURANT_TIMEZONE))

    @staticmethod
    def invalidate_cache():
        RestaurantStatusService._cached_status = None
        RestaurantStatusService._cached_at = 0.0

    @staticmethod
    async def is_open(session: Session | AsyncSession) -> RestaurantStatusDTO:
        ttl = config.RESTAURANT_STATUS_TTL_SECONDS
        cached = RestaurantStatusService._cached_status
        if cached is not None and ttl > 0 and time_module.monotonic() - RestaurantStatusService._cached_at < ttl:
            return cached

        status = await RestaurantStatusService.compute_status(RestaurantStatusService.now(), session)
        RestaurantStatusService._cached_status = status
        RestaurantStatusService._cached_at = time_module.monotonic()
        return status

    @staticmethod
    async def compute_status(now: datetime, session: Session | AsyncSession) -> RestaurantStatusDTO:
        settings = await RestaurantRepository.get_settings(session)
        if settings.is_manually_closed:
            return RestaurantStatusDTO(is_open=False,
                                       reason=settings.manual_closure_reason or "Restaurant is temporarily closed")

        hours = await RestaurantRepository.get_operating_hours(session)
        holidays = await RestaurantRepository.get_holidays(now.date(), now.date() + timedelta(days=7), session)

        holiday = holidays.get(now.date())
        if holiday is not None:
            return RestaurantStatusDTO(is_open=False,
                                       reason=f"Closed for {holiday}",
                                       next_open_time=RestaurantStatusService.next_open_time(now, hours, holidays))

        today_slots = [slot for slot in hours if slot.day_of_week == now.weekday() and not slot.is_closed]
        if not today_slots:
            return RestaurantStatusDTO(is_open=False,
                                       reason="Closed today",
                                       next_open_time=RestaurantStatusService.next_open_time(now, hours, holidays))

        current_time = now.time().replace(tzinfo=None)
        for slot in today_slots:
            if slot.open_time <= current_time <= slot.close_time:
                return RestaurantStatusDTO(is_open=True, reason="Open")

        return RestaurantStatusDTO(is_open=False,
                                   reason="Closed now",
                                   next_open_time=RestaurantStatusService.next_open_time(now, hours, holidays))

    @staticmethod
    def next_open_time(now: datetime, hours: list[OperatingHoursDTO], holidays: dict) -> datetime | None:
        """First slot start after now within the coming week, skipping holidays."""
        current_time = now.time().replace(tzinfo=None)
        for days_ahead in range(0, 8):
            day = now.date() + timedelta(days=days_ahead)
            if day in holidays:
                continue
            slots = sorted((slot for slot in hours if slot.day_of_week == day.weekday() and not slot.is_closed),
                           key=lambda slot: slot.open_time)
            for slot in slots:
                if days_ahead == 0 and slot.open_time <= current_time:
                    continue
                return datetime.combine(day, slot.open_time, tzinfo=now.tzinfo)
        return None

    @staticmethod
    async def close(reason: str | None, session: Session | AsyncSession):
        await RestaurantRepository.set_manual_closure(True, reason, session)
        RestaurantStatusService.invalidate_cache()
        logger.info(f"🔒 Restaurant closed manually: {reason or '(no reason)'}")

    @staticmethod
    async def open(session: Session | AsyncSession):
        await RestaurantRepository.set_manual_closure(False, None, session)
        RestaurantStatusService.invalidate_cache()
        logger.info("🔓 Restaurant reopened manually")

    @staticmethod
    async def get_default_delivery_fee(session: Session | AsyncSession):
        settings = await RestaurantRepository.get_settings(session)
        if settings.delivery_fee is not None:
            return settings.delivery_fee
        return config.DEFAULT_DELIVERY_CHARGE
