"""
YooKassa payment gateway client.

Talks to the YooKassa REST API (``POST /payments``) with HTTP basic auth
(shop id / secret key). Only payment creation is needed here: the gateway
later reports the outcome through the webhook.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the gateway rejects a request or cannot be reached."""


@dataclass
class GatewayPayment:
    id: str
    status: str
    confirmation_url: str


class YooKassaGateway:
    """Minimal async client for the YooKassa payments API"""

    def __init__(
        self,
        shop_id: str,
        secret_key: str,
        api_url: str = "https://api.yookassa.ru/v3",
        timeout: float = 30.0,
    ):
        self.shop_id = shop_id
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    async def create_payment(
        self,
        amount: float,
        description: str,
        return_url: str,
        metadata: Optional[Dict[str, Any]] = None,
        currency: str = "RUB",
    ) -> GatewayPayment:
        """
        Create a payment with redirect confirmation.

        Args:
            amount: Amount in major units (e.g. 500 for 500.00 RUB)
            description: Human readable payment description
            return_url: Where the gateway sends the user after paying
            metadata: Free-form values echoed back in the webhook
            currency: ISO currency code

        Returns:
            GatewayPayment with the gateway-assigned id and confirmation URL

        Raises:
            PaymentGatewayError: on transport errors, non-2xx responses or
                a response without a confirmation URL
        """
        payload = {
            "amount": {"value": f"{amount:.2f}", "currency": currency},
            "confirmation": {"type": "redirect", "return_url": return_url},
            "capture": True,
            "description": description,
            "metadata": metadata or {},
        }
        headers = {"Idempotence-Key": str(uuid.uuid4())}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.api_url}/payments",
                    json=payload,
                    headers=headers,
                    auth=(self.shop_id, self.secret_key),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"YooKassa rejected payment: {e.response.status_code} {e.response.text}")
            raise PaymentGatewayError(f"YooKassa returned {e.response.status_code}: {e.response.text}") from e
        except (httpx.RequestError, ValueError) as e:
            logger.error(f"YooKassa request failed: {e}")
            raise PaymentGatewayError(str(e)) from e

        confirmation_url = (data.get("confirmation") or {}).get("confirmation_url")
        if not data.get("id") or not confirmation_url:
            raise PaymentGatewayError("YooKassa response is missing payment id or confirmation URL")

        logger.info(f"YooKassa payment created: {data['id']} ({data.get('status')})")
        return GatewayPayment(
            id=data["id"],
            status=data.get("status", "pending"),
            confirmation_url=confirmation_url,
        )


def get_payment_gateway() -> Optional[YooKassaGateway]:
    """
    Dependency returning the configured gateway client.
    None means test mode: payments are only recorded locally.
    """
    if not settings.gateway_configured:
        return None
    return YooKassaGateway(
        shop_id=settings.yookassa_shop_id,
        secret_key=settings.yookassa_secret_key,
        api_url=settings.yookassa_api_url,
        timeout=settings.gateway_timeout,
    )
