import json
import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from db import get_db_session
from exceptions.payment import InvalidPaymentAmountException, PaymentTransactionNotFoundException
from models.payment_transaction import PaymentWebhookDTO
from services.payment import PaymentService
from services.payment_gateway import UpiGatewayClient

processing_router = APIRouter(prefix="/payments")


def __security_check(x_signature_header: str | None, payload: bytes) -> bool:
    """
    Validate HMAC-SHA256 signature from the payment gateway webhook.

    Security: Missing signature header is treated as authentication failure.
    Only valid signatures are accepted.

    Args:
        x_signature_header: X-Payment-Signature header from webhook request
        payload: Raw request body bytes

    Returns:
        bool: True if signature is valid, False otherwise
    """
    if x_signature_header is None:
        logging.warning("Payment webhook rejected: Missing X-Payment-Signature header")
        return False
    return UpiGatewayClient.verify_signature(payload, x_signature_header)


@processing_router.post("/webhook")
async def payment_webhook(request: Request):
    """
    Webhook endpoint for UPI gateway payment notifications.

    Deliveries may repeat; PaymentService.handle_webhook is idempotent.
    Unknown transactions and amount mismatches are acknowledged with 4xx
    (a retry cannot fix them), anything unexpected surfaces as 5xx so the
    gateway retries later.
    """
    request_body = await request.body()

    # DEBUG level to keep payer details out of production logs
    logging.debug("=" * 80)
    logging.debug("🔔 PAYMENT WEBHOOK RECEIVED")
    logging.debug(f"Raw Body: {request_body.decode('utf-8', errors='replace')}")
    logging.debug("=" * 80)

    is_security_pass = __security_check(request.headers.get("X-Payment-Signature"), request_body)
    if is_security_pass is False:
        logging.error("❌ WEBHOOK SECURITY CHECK FAILED - Invalid HMAC signature")
        raise HTTPException(status_code=403, detail="Invalid signature")

    logging.info("✅ Webhook security check passed")

    try:
        payload = PaymentWebhookDTO.model_validate(json.loads(request_body))
    except (ValueError, ValidationError) as e:
        logging.error(f"❌ Malformed payment webhook: {e}")
        raise HTTPException(status_code=400, detail="Malformed payload")

    async with get_db_session() as session:
        try:
            outcome = await PaymentService.handle_webhook(payload, session)
        except (PaymentTransactionNotFoundException, InvalidPaymentAmountException):
            # Handled by the registered exception handlers (404 / 422)
            raise
        except Exception as e:
            logging.error(f"❌ Webhook processing failed for {payload.gateway_order_id or payload.client_txn_id}: {e}",
                          exc_info=True)
            raise HTTPException(status_code=500, detail="Webhook processing failed")

    logging.info(f"✅ Webhook processed: {payload.gateway_order_id or payload.client_txn_id} -> {outcome}")
    return {"status": "ok", "outcome": outcome}
