import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from enums.payment_status import PaymentTransactionStatus
from enums.transition_actor import TransitionActor
from exceptions.order import OrderNotFoundException, OrderOwnershipException, StaleStatusException
from exceptions.payment import (
    InvalidOrderStateForPaymentException,
    InvalidPaymentAmountException,
    PaymentTransactionNotFoundException,
)
from models.order_event import OrderEventDTO
from models.payment_transaction import PaymentIntentDTO, PaymentTransactionDTO, PaymentWebhookDTO
from repositories.order import OrderRepository
from repositories.payment_transaction import PaymentTransactionRepository
from services.notification import NotificationService
from services.order_status import OrderStatusService
from services.payment_gateway import CustomerInfoDTO, UpiGatewayClient
from utils.money import to_money


class PaymentService:

    @staticmethod
    async def initiate(order_id: int,
                       user_id: int | None,
                       session: Session | AsyncSession,
                       customer: CustomerInfoDTO | None = None,
                       verify_owner: bool = True) -> PaymentIntentDTO:
        """
        Get a payment intent for an order awaiting payment.

        Only the signed-in owner may pay an existing order; an anonymous
        caller has no proof of ownership, even for a guest order. The
        checkout path passes verify_owner=False for the order it just created.

        An order has at most one pending transaction: if one exists its
        intent is returned again instead of creating a new gateway order.
        Gateway failures propagate as PaymentGatewayException and leave the
        order untouched in pending_payment, so the call can be retried.
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if verify_owner and (user_id is None or order.user_id != user_id):
            raise OrderOwnershipException(order_id, user_id)
        if order.status != OrderStatus.PENDING_PAYMENT:
            raise InvalidOrderStateForPaymentException(order_id, order.status.value)

        existing = await PaymentTransactionRepository.get_pending_by_order_id(order_id, session)
        if existing is not None and existing.gateway_order_id:
            logging.info(f"Reusing pending payment {existing.gateway_order_id} for order {order_id}")
            return PaymentService._to_intent(existing)

        client_txn_id = UpiGatewayClient.make_client_txn_id(order_id)
        intent = await UpiGatewayClient.create_order(order_id, order.total_price, client_txn_id, customer)

        transaction_dto = PaymentTransactionDTO(
            order_id=order_id,
            client_txn_id=client_txn_id,
            gateway_order_id=intent.gateway_order_id,
            amount=order.total_price,
            currency=order.currency,
            status=PaymentTransactionStatus.PENDING,
            qr_string=intent.qr_string,
            payment_url=intent.payment_url,
        )
        await PaymentTransactionRepository.create(transaction_dto, session)
        await OrderRepository.set_gateway_order_id(order_id, intent.gateway_order_id, session)
        await session_commit(session)
        logging.info(f"💳 Payment initiated for order {order_id}: gateway order {intent.gateway_order_id}, "
                     f"amount {order.currency} {order.total_price}")
        return PaymentService._to_intent(transaction_dto)

    @staticmethod
    def _to_intent(transaction: PaymentTransactionDTO) -> PaymentIntentDTO:
        return PaymentIntentDTO(
            order_id=transaction.order_id,
            gateway_order_id=transaction.gateway_order_id,
            client_txn_id=transaction.client_txn_id,
            amount=transaction.amount,
            currency=transaction.currency,
            qr_string=transaction.qr_string,
            payment_url=transaction.payment_url,
        )

    @staticmethod
    async def handle_webhook(payload: PaymentWebhookDTO, session: Session | AsyncSession) -> str:
        """
        Apply a verified gateway callback.

        Idempotent: a callback for a transaction that already reached a
        terminal state changes nothing. Success confirms a pending order,
        failure cancels it. A success for an order that was cancelled in the
        meantime is recorded and flagged for manual refund.

        Returns:
            Short outcome label, logged and echoed to the gateway

        Raises:
            PaymentTransactionNotFoundException: Unknown transaction
            InvalidPaymentAmountException: Reported amount differs from the transaction amount
        """
        transaction = await PaymentTransactionRepository.get_by_gateway_reference(
            payload.gateway_order_id, payload.client_txn_id, session)
        if transaction is None:
            raise PaymentTransactionNotFoundException(payload.gateway_order_id, payload.client_txn_id)

        if transaction.status.is_terminal:
            logging.info(f"Duplicate callback for payment {transaction.id} (already {transaction.status.value})")
            return "duplicate"

        if payload.succeeded:
            if payload.amount is not None and to_money(payload.amount) != to_money(transaction.amount):
                logging.error(f"❌ Amount mismatch for payment {transaction.id}: "
                              f"expected {transaction.amount}, got {payload.amount}")
                raise InvalidPaymentAmountException(transaction.amount, payload.amount, transaction.currency)
            return await PaymentService._handle_success(transaction, payload, session)
        return await PaymentService._handle_failure(transaction, payload, session)

    @staticmethod
    async def _handle_success(transaction: PaymentTransactionDTO, payload: PaymentWebhookDTO,
                              session: Session | AsyncSession) -> str:
        now = datetime.utcnow()
        event = None
        requires_refund = False
        outcome = "confirmed"
        try:
            event = await OrderStatusService.apply_transition(
                transaction.order_id, OrderStatus.CONFIRMED, TransitionActor.PAYMENT_GATEWAY, session,
                expected_status=OrderStatus.PENDING_PAYMENT,
                extra_values={"paid_at": now},
            )
        except StaleStatusException as e:
            # Staff got there first (manual confirm or cancel); decide on the fresh status
            await session_rollback(session)
            current_status = await OrderRepository.get_status(transaction.order_id, session)
            if current_status == OrderStatus.CANCELLED:
                requires_refund = True
                outcome = "refund_required"
                logging.warning(f"⚠️ Payment received for cancelled order {transaction.order_id}, "
                                f"flagged for manual refund")
            else:
                outcome = "already_confirmed"
                logging.info(f"Order {transaction.order_id} already {e.current_status}, payment recorded only")

        finalized = await PaymentTransactionRepository.finalize(
            transaction.id, PaymentTransactionStatus.COMPLETED, session,
            upi_txn_id=payload.upi_txn_id,
            completed_at=now,
            requires_refund=requires_refund,
        )
        if not finalized:
            # A parallel delivery of the same callback won
            await session_rollback(session)
            return "duplicate"
        await session_commit(session)

        logging.info(f"✅ Payment {transaction.id} completed for order {transaction.order_id} ({outcome})")
        if event is not None:
            NotificationService.emit(event)
        return outcome

    @staticmethod
    async def _handle_failure(transaction: PaymentTransactionDTO, payload: PaymentWebhookDTO,
                              session: Session | AsyncSession) -> str:
        event: OrderEventDTO | None = None
        outcome = "cancelled"
        try:
            event = await OrderStatusService.apply_transition(
                transaction.order_id, OrderStatus.CANCELLED, TransitionActor.PAYMENT_GATEWAY, session,
                expected_status=OrderStatus.PENDING_PAYMENT,
                reason=payload.reason or "Payment failed",
            )
        except StaleStatusException as e:
            await session_rollback(session)
            outcome = "ignored"
            logging.info(f"Payment failure for order {transaction.order_id} ignored, order is {e.current_status}")

        finalized = await PaymentTransactionRepository.finalize(
            transaction.id, PaymentTransactionStatus.FAILED, session,
            failure_reason=payload.reason,
        )
        if not finalized:
            await session_rollback(session)
            return "duplicate"
        await session_commit(session)

        logging.info(f"❌ Payment {transaction.id} failed for order {transaction.order_id} ({outcome})")
        if event is not None:
            NotificationService.emit(event)
        return outcome
