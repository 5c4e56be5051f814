from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, Boolean, func

from models.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True, unique=True)
    email = Column(String(255), nullable=True)
    push_token = Column(String(255), nullable=True)  # Expo push token of the customer app
    is_staff = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now())


class UserDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    push_token: str | None = None
    is_staff: bool | None = None
    created_at: datetime | None = None
