from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.notification import Notification, NotificationDTO
from models.user import User


class NotificationRepository:

    @staticmethod
    async def create_many(notifications: list[NotificationDTO], session: Session | AsyncSession) -> None:
        for notification_dto in notifications:
            session.add(Notification(**notification_dto.model_dump(exclude_none=True)))
        await session_flush(session)

    @staticmethod
    async def get_by_user_id(user_id: int | None, limit: int, offset: int,
                             session: Session | AsyncSession) -> list[NotificationDTO]:
        """Notifications for a user; user_id None returns the staff feed."""
        stmt = select(Notification)
        if user_id is None:
            stmt = stmt.where(Notification.user_id.is_(None))
        else:
            stmt = stmt.where(Notification.user_id == user_id)
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).offset(offset)
        notifications = (await session_execute(stmt, session)).scalars().all()
        return [NotificationDTO.model_validate(notification, from_attributes=True) for notification in notifications]

    @staticmethod
    async def get_push_token(user_id: int, session: Session | AsyncSession) -> str | None:
        stmt = select(User.push_token).where(User.id == user_id)
        return (await session_execute(stmt, session)).scalar()
