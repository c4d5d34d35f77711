"""
Billing Service - payment creation and YooKassa webhook processing
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings, SUBSCRIPTION_PLAN_MONTHLY, SUBSCRIPTION_DAYS
from crud.payment import PaymentRepository
from crud.user import UserRepository
from services.payment_gateway import YooKassaGateway

logger = logging.getLogger(__name__)

EVENT_PAYMENT_SUCCEEDED = "payment.succeeded"


def parse_webhook_body(body: Union[bytes, str, dict]) -> Dict[str, Any]:
    """
    Decode a webhook envelope.

    The gateway body may arrive as raw bytes/text or already parsed; a JSON
    string that itself contains JSON is unwrapped once more.

    Raises:
        ValueError: if the body does not decode to a JSON object
    """
    event: Any = body
    if isinstance(event, bytes):
        event = event.decode("utf-8")
    if isinstance(event, str):
        event = json.loads(event)
    if isinstance(event, str):
        event = json.loads(event)
    if not isinstance(event, dict):
        raise ValueError("Webhook body must be a JSON object")
    return event


class BillingService:
    """
    Service class for handling billing-related business logic.
    Owns the payment lifecycle: pending on creation, succeeded on webhook.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the billing service.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db
        self.payments = PaymentRepository(db)
        self.users = UserRepository(db)

    async def create_payment(
        self,
        amount: float,
        user_id: str,
        plan: str,
        return_url: Optional[str] = None,
        gateway: Optional[YooKassaGateway] = None,
    ):
        """
        Create a pending payment, through the gateway when one is configured.

        Args:
            amount: Amount in RUB
            user_id: Owning user (not validated to exist)
            plan: Plan name shown in the description
            return_url: Where to send the user after payment
            gateway: Gateway client, None for test mode

        Returns:
            Normalized response: {"data": {...}, "is_error": False} or {"error": str(e), "is_error": True}
        """
        description = f"Оплата подписки - {plan}"
        redirect_target = return_url or settings.payment_return_url

        try:
            if gateway is not None:
                gateway_payment = await gateway.create_payment(
                    amount=amount,
                    description=description,
                    return_url=redirect_target,
                    metadata={"userId": user_id, "plan": plan},
                )
                payment = await self.payments.create_payment({
                    "user_id": user_id,
                    "amount": amount,
                    "payment_id": gateway_payment.id,
                    "description": description,
                })
                await self.db.commit()
                data = {
                    "paymentId": payment.payment_id,
                    "redirectUrl": gateway_payment.confirmation_url,
                }
            else:
                payment = await self.payments.create_payment({
                    "user_id": user_id,
                    "amount": amount,
                    "description": description,
                })
                await self.db.commit()
                logger.info(f"Test payment {payment.id} recorded for user {user_id}")
                data = {
                    "paymentId": payment.payment_id,
                    "redirectUrl": redirect_target,
                    "test": True,
                }

            return {"data": data, "is_error": False}
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Payment creation error: {e}", exc_info=True)
            return {"error": str(e), "is_error": True}

    async def process_webhook(self, event: Dict[str, Any]):
        """
        Apply a gateway notification.

        Only payment.succeeded changes state: the payment is marked succeeded
        and the owner's subscription is opened for SUBSCRIPTION_DAYS, both in
        one commit. A payment that already succeeded is left untouched so a
        redelivered event is a no-op.

        Args:
            event: Decoded webhook envelope

        Returns:
            Normalized response whose data is
            {"handled": bool, "notification": {"chat_id", "end_date"} | None}
        """
        try:
            event_type = event.get("event")
            payment_object = event.get("object") or {}
            gateway_id = payment_object.get("id")
            logger.info(f"Processing YooKassa webhook event: {event_type} ({gateway_id})")

            result = {"handled": False, "notification": None}
            if event_type != EVENT_PAYMENT_SUCCEEDED or not gateway_id:
                return {"data": result, "is_error": False}

            payment = await self.payments.get_by_gateway_id(str(gateway_id))
            if payment is None:
                logger.warning(f"Webhook for unknown payment {gateway_id}")
                return {"data": result, "is_error": False}

            # Only the delivery that flips pending -> succeeded goes on
            if not await self.payments.mark_succeeded_if_pending(str(gateway_id)):
                await self.db.rollback()
                logger.info(f"Payment {gateway_id} already succeeded, skipping")
                return {"data": result, "is_error": False}

            user = await self.users.get_user_by_id(payment.user_id) if payment.user_id else None
            if user is not None:
                await self.users.activate_subscription(
                    user,
                    plan=SUBSCRIPTION_PLAN_MONTHLY,
                    days=SUBSCRIPTION_DAYS,
                    now=datetime.utcnow(),
                )
            else:
                logger.warning(f"Payment {gateway_id} references unknown user {payment.user_id}")

            await self.db.commit()
            result["handled"] = True
            logger.info(f"✅ Payment {gateway_id} succeeded")

            if user is not None and user.telegram_id:
                result["notification"] = {
                    "chat_id": user.telegram_id,
                    "end_date": user.subscription_end_date,
                }
            return {"data": result, "is_error": False}

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error processing webhook: {e}", exc_info=True)
            return {"error": str(e), "is_error": True}
