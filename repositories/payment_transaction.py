from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.payment_status import PaymentTransactionStatus
from models.payment_transaction import PaymentTransaction, PaymentTransactionDTO


class PaymentTransactionRepository:

    @staticmethod
    async def create(transaction_dto: PaymentTransactionDTO, session: Session | AsyncSession) -> int:
        transaction = PaymentTransaction(**transaction_dto.model_dump(exclude_none=True))
        session.add(transaction)
        await session_flush(session)
        return transaction.id

    @staticmethod
    async def get_pending_by_order_id(order_id: int, session: Session | AsyncSession) -> PaymentTransactionDTO | None:
        stmt = (select(PaymentTransaction)
                .where(PaymentTransaction.order_id == order_id,
                       PaymentTransaction.status == PaymentTransactionStatus.PENDING)
                .order_by(PaymentTransaction.id.desc())
                .limit(1))
        transaction = (await session_execute(stmt, session)).scalar()
        if transaction is None:
            return None
        return PaymentTransactionDTO.model_validate(transaction, from_attributes=True)

    @staticmethod
    async def get_by_gateway_reference(gateway_order_id: str | None, client_txn_id: str | None,
                                       session: Session | AsyncSession) -> PaymentTransactionDTO | None:
        if gateway_order_id:
            stmt = select(PaymentTransaction).where(PaymentTransaction.gateway_order_id == gateway_order_id)
        elif client_txn_id:
            stmt = select(PaymentTransaction).where(PaymentTransaction.client_txn_id == client_txn_id)
        else:
            return None
        stmt = stmt.execution_options(populate_existing=True)
        transaction = (await session_execute(stmt, session)).scalar()
        if transaction is None:
            return None
        return PaymentTransactionDTO.model_validate(transaction, from_attributes=True)

    @staticmethod
    async def get_by_order_id(order_id: int, session: Session | AsyncSession) -> list[PaymentTransactionDTO]:
        stmt = (select(PaymentTransaction)
                .where(PaymentTransaction.order_id == order_id)
                .order_by(PaymentTransaction.id))
        transactions = (await session_execute(stmt, session)).scalars().all()
        return [PaymentTransactionDTO.model_validate(transaction, from_attributes=True)
                for transaction in transactions]

    @staticmethod
    async def finalize(transaction_id: int,
                       status: PaymentTransactionStatus,
                       session: Session | AsyncSession,
                       **values) -> bool:
        """
        Move a pending transaction to a terminal status.

        Returns:
            False if the transaction was no longer pending (duplicate callback)
        """
        stmt = (update(PaymentTransaction)
                .where(PaymentTransaction.id == transaction_id,
                       PaymentTransaction.status == PaymentTransactionStatus.PENDING)
                .values(status=status, updated_at=datetime.utcnow(), **values)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount == 1
