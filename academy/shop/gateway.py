"""Razorpay client: order creation and payment signature checks."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

import httpx

from academy.config import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Gateway unreachable or rejected the request."""


def payment_signature(razorpay_order_id: str, payment_id: str, key_secret: str) -> str:
    """Hex HMAC-SHA256 of 'order_id|payment_id' as Razorpay signs checkout callbacks."""
    message = f"{razorpay_order_id}|{payment_id}".encode()
    return hmac.new(key_secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    razorpay_order_id: str,
    payment_id: str,
    signature: str,
    key_secret: str,
) -> bool:
    expected = payment_signature(razorpay_order_id, payment_id, key_secret)
    # compare_digest rejects non-ASCII str, so compare the encoded bytes.
    return hmac.compare_digest(expected.encode(), signature.encode())


class RazorpayClient:
    """Minimal Razorpay Orders API client."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = (base_url or settings.razorpay_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.razorpay_timeout_seconds
        self.transport = transport

    async def _request(self, method: str, endpoint: str, **kwargs) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=f"{self.base_url}{endpoint}",
                    auth=(self.key_id, self.key_secret),
                    **kwargs,
                )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"Razorpay unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise PaymentGatewayError(
                f"Razorpay error {response.status_code}: {response.text[:200]}"
            )
        return response.json() if response.content else {}

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Create a gateway order. `amount` is in the currency's minor unit (paise)."""
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        return await self._request("POST", "/orders", json=payload)


def get_gateway() -> RazorpayClient | None:
    """Configured client, or None in test mode (keys missing)."""
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        return None
    return RazorpayClient(settings.razorpay_key_id, settings.razorpay_key_secret)
