from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, func, Index, \
    Enum as SQLEnum

from enums.notification_template import NotificationTemplate
from models.base import Base


class Notification(Base):
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, unique=True)
    # NULL = staff notification, shown in the admin console
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="SET NULL"), nullable=True)
    template = Column(SQLEnum(NotificationTemplate, native_enum=False), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index('ix_notifications_user_created', 'user_id', 'created_at'),
    )


class NotificationDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    order_id: int | None = None
    template: NotificationTemplate | None = None
    title: str | None = None
    message: str | None = None
    data: dict | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None
