"""
UPI dynamic-QR payment gateway adapter.

Creates gateway orders over HTTP and verifies webhook signatures. In
PAYMENT_TEST_MODE no request leaves the process and simulated intents
are returned, so the full order flow can run without merchant credentials.
"""

import asyncio
import hashlib
import hmac
import logging
import time
import uuid
from decimal import Decimal

import aiohttp
from pydantic import BaseModel

import config
from exceptions.payment import PaymentGatewayException

logger = logging.getLogger(__name__)


class GatewayIntentDTO(BaseModel):
    gateway_order_id: str
    qr_string: str | None = None
    payment_url: str | None = None


class CustomerInfoDTO(BaseModel):
    name: str | None = None
    email: str | None = None
    mobile: str | None = None


class UpiGatewayClient:

    @staticmethod
    def make_client_txn_id(order_id: int) -> str:
        return f"order_{order_id}_{int(time.time() * 1000)}"

    @staticmethod
    async def create_order(order_id: int,
                           amount: Decimal,
                           client_txn_id: str,
                           customer: CustomerInfoDTO | None = None) -> GatewayIntentDTO:
        """
        Create a payment order at the gateway.

        Raises:
            PaymentGatewayException: On HTTP errors, timeouts or a rejected request
        """
        customer = customer or CustomerInfoDTO()

        if config.PAYMENT_TEST_MODE:
            gateway_order_id = f"test_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"
            logger.warning(f"Payment gateway TEST MODE: simulated intent {gateway_order_id} for order {order_id}")
            return GatewayIntentDTO(
                gateway_order_id=gateway_order_id,
                qr_string=f"upi://pay?pa=merchant@upi&pn=Restaurant&am={amount}&tn={client_txn_id}",
                payment_url=f"https://test.upigateway.com/pay/{gateway_order_id}",
            )

        payload = {
            "key": config.PAYMENT_GATEWAY_MERCHANT_KEY,
            "client_txn_id": client_txn_id,
            "amount": str(amount),
            "p_info": f"{config.PAYMENT_ORDER_NOTES_PREFIX} #{order_id}",
            "customer_name": customer.name or "Customer",
            "customer_email": customer.email or "",
            "customer_mobile": customer.mobile or "",
            "redirect_url": config.PAYMENT_CALLBACK_URL,
            "udf1": str(order_id),
        }

        logger.info(f"Creating gateway order for order {order_id} (client txn {client_txn_id}, amount {amount})")
        try:
            timeout = aiohttp.ClientTimeout(total=config.PAYMENT_REQUEST_TIMEOUT_SECONDS)
            async with aiohttp.ClientSession(timeout=timeout) as http_session:
                async with http_session.post(f"{config.PAYMENT_GATEWAY_API_URL}/create_order",
                                             json=payload,
                                             headers={"Accept": "application/json"}) as response:
                    if response.status != 200:
                        body = await response.text()
                        logger.error(f"Gateway HTTP {response.status} for order {order_id}: {body[:500]}")
                        raise PaymentGatewayException(f"HTTP {response.status}", order_id, response.status)
                    data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"Gateway network error for order {order_id}: {e}")
            raise PaymentGatewayException("Unable to reach payment gateway", order_id)
        except asyncio.TimeoutError:
            logger.error(f"Gateway timeout for order {order_id}")
            raise PaymentGatewayException("Payment gateway timed out", order_id)

        if data.get("status") not in (True, "true"):
            message = data.get("msg") or data.get("message") or "Failed to create payment order"
            logger.error(f"Gateway rejected order {order_id}: {message}")
            raise PaymentGatewayException(message, order_id)

        result = data.get("data") or {}
        if not result.get("order_id"):
            raise PaymentGatewayException("Gateway response has no order id", order_id)
        return GatewayIntentDTO(
            gateway_order_id=str(result["order_id"]),
            qr_string=result.get("qr_string"),
            payment_url=result.get("payment_url"),
        )

    @staticmethod
    def compute_signature(raw_body: bytes) -> str:
        return hmac.new(
            config.PAYMENT_WEBHOOK_SECRET.encode("utf-8"),
            raw_body,
            hashlib.sha256
        ).hexdigest()

    @staticmethod
    def verify_signature(raw_body: bytes, signature: str | None) -> bool:
        """
        HMAC-SHA256 of the raw request body, compared in constant time.
        """
        if not signature or not config.PAYMENT_WEBHOOK_SECRET:
            return False
        expected = UpiGatewayClient.compute_signature(raw_body)
        return hmac.compare_digest(expected, signature.strip().lower())
