"""
Billing Router - payment creation and the YooKassa webhook
"""

import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.billing_service import BillingService, parse_webhook_body
from services.notification_service import TelegramNotifier, get_notifier, notify_subscription_activated
from services.payment_gateway import YooKassaGateway, get_payment_gateway
from backend.utils.responses import success_response, error_response

logger = logging.getLogger(__name__)

# Create billing router
billing_router = APIRouter(prefix="/api", tags=["billing"])


class CreatePaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(gt=0)
    user_id: str = Field(alias="userId", min_length=1)
    plan: str = ""
    return_url: Optional[str] = Field(default=None, alias="returnUrl")


# Gateway callback, not called by end users
@billing_router.post("/webhook/yookassa")
async def yookassa_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    notifier: Optional[TelegramNotifier] = Depends(get_notifier),
):
    """
    Handle YooKassa payment notifications.

    Reads the raw body so both text and JSON deliveries are accepted.
    Acknowledges with an empty 200 whether or not a payment matched;
    an empty 500 is returned only when processing fails.
    """
    try:
        event = parse_webhook_body(await request.body())
    except Exception as e:
        logger.error(f"Invalid webhook payload: {e}")
        return Response(status_code=500)

    result = await BillingService(db).process_webhook(event)
    if result.get("is_error"):
        return Response(status_code=500)

    notification = result["data"].get("notification")
    if notification:
        if notifier is None:
            logger.warning("TELEGRAM_BOT_TOKEN is not set. Skipping subscription notification.")
        else:
            background_tasks.add_task(
                notify_subscription_activated,
                notifier,
                notification["chat_id"],
                notification["end_date"],
            )

    return Response(status_code=200)


@billing_router.post("/create-payment")
async def create_payment(
    request: CreatePaymentRequest,
    db: AsyncSession = Depends(get_db),
    gateway: Optional[YooKassaGateway] = Depends(get_payment_gateway),
):
    """
    Start a subscription payment.

    Returns:
        {"success": true, "paymentId", "redirectUrl"} plus "test": true
        when no gateway is configured
    """
    result = await BillingService(db).create_payment(
        amount=request.amount,
        user_id=request.user_id,
        plan=request.plan,
        return_url=request.return_url,
        gateway=gateway,
    )
    if result.get("is_error"):
        return error_response("Payment creation failed", status=500, message=result.get("error"))
    return success_response(result["data"])
