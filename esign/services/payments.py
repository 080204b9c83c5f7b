"""Razorpay integration: order creation over the REST API and checkout
signature verification."""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from datetime import datetime
from typing import Any, Optional

import httpx

from esign.core.config import settings
from esign.lifecycle.errors import Timeout

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Raised when the payment gateway rejects a request or is misconfigured."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def verify_payment_signature(order_id: str, payment_id: str, signature: str, key_secret: str) -> bool:
    """Check the checkout signature: HMAC-SHA256 of "<order_id>|<payment_id>", hex encoded."""
    if not key_secret:
        raise PaymentError("Payment gateway is not configured", status_code=503)
    digest = hmac.new(
        key_secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(digest, signature or "")


def one_year_after(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # 29 February
        return moment.replace(year=moment.year + 1, day=28)


class RazorpayGateway:
    """Thin client for the Razorpay Orders API."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        *,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self._client = httpx.Client(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount: int, currency: str = "INR", receipt: Optional[str] = None) -> dict[str, Any]:
        """Create an order for `amount` major currency units (sent in the smallest unit)."""
        if not self.configured:
            raise PaymentError("Payment gateway is not configured", status_code=503)
        payload = {
            "amount": amount * 100,
            "currency": currency,
            "receipt": receipt or f"receipt_order_{int(time.time() * 1000)}",
        }
        try:
            resp = self._client.post("/orders", json=payload)
        except httpx.TimeoutException as e:
            logger.warning("Razorpay order creation timed out: %s", e)
            raise Timeout("Payment gateway timed out") from e
        except httpx.RequestError as e:
            raise PaymentError(f"Payment gateway unreachable: {e}", status_code=502) from e

        if resp.status_code >= 400:
            logger.error("Razorpay order creation failed: %s %s", resp.status_code, resp.text)
            raise PaymentError("Payment gateway rejected the order", status_code=502)
        order = resp.json()
        logger.info("Created Razorpay order %s", order.get("id"))
        return order

    def verify(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(order_id, payment_id, signature, self.key_secret)

    def close(self) -> None:
        self._client.close()


def build_gateway() -> RazorpayGateway:
    return RazorpayGateway(
        settings.RAZORPAY_KEY_ID,
        settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_API_BASE,
        timeout=settings.PAYMENT_TIMEOUT_S,
    )


__all__ = ["PaymentError", "RazorpayGateway", "build_gateway", "one_year_after", "verify_payment_signature"]
