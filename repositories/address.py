from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.address import Address, AddressDTO
from models.location import DeliveryZoneDTO


class AddressRepository:

    @staticmethod
    async def get_owned(address_id: int, user_id: int | None, session: Session | AsyncSession) -> AddressDTO | None:
        """
        Address by id, only if it belongs to user_id.

        Guests (user_id None) may only use addresses captured without an owner.
        """
        stmt = select(Address).where(Address.id == address_id)
        if user_id is None:
            stmt = stmt.where(Address.user_id.is_(None))
        else:
            stmt = stmt.where(Address.user_id == user_id)
        address = (await session_execute(stmt, session)).scalar()
        if address is None:
            return None
        address_dto = AddressDTO.model_validate(address, from_attributes=True)
        if address.location is not None:
            address_dto.delivery_zone = DeliveryZoneDTO.model_validate(address.location, from_attributes=True)
        return address_dto
