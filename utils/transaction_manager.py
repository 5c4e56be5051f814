import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from db import get_db_session, session_commit, session_rollback

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Utility class for all-or-nothing database work.

    Order creation is the only flow that writes several rows that must
    appear together; it runs inside atomic_transaction().
    """

    # Transaction duration above which a warning is logged (seconds)
    TRANSACTION_TIMEOUT = 30

    @staticmethod
    @asynccontextmanager
    async def atomic_transaction(timeout: Optional[int] = None) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for atomic database transactions.

        Commits when the block exits normally, rolls back and re-raises otherwise.

        Usage:
            async with TransactionManager.atomic_transaction() as session:
                # Database operations here
                await session.execute(...)
        """
        timeout = timeout or TransactionManager.TRANSACTION_TIMEOUT

        async with get_db_session() as session:
            transaction_start = datetime.utcnow()
            logger.debug(f"Transaction started at {transaction_start}")
            try:
                yield session

                duration = (datetime.utcnow() - transaction_start).total_seconds()
                if duration > timeout:
                    logger.warning(f"Transaction exceeded timeout: {duration}s > {timeout}s")

                await session_commit(session)
                logger.debug(f"Transaction committed successfully in {duration:.2f}s")
            except Exception as e:
                try:
                    await session_rollback(session)
                    logger.info(f"Transaction rolled back due to error: {type(e).__name__}: {str(e)}")
                except Exception as rollback_error:
                    logger.critical(f"Failed to rollback transaction: {str(rollback_error)}")
                raise
