"""
Notification Service - Telegram messages for subscription events
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramNotifier:
    """Sends plain text messages through the Telegram Bot API"""

    def __init__(self, bot_token: str, timeout: float = 10.0):
        self.bot_token = bot_token
        self.timeout = timeout

    async def send_message(self, chat_id: str, text: str) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{TELEGRAM_API_URL}/bot{self.bot_token}/sendMessage",
                json={"chat_id": chat_id, "text": text},
            )
            response.raise_for_status()


def get_notifier() -> Optional[TelegramNotifier]:
    """Dependency returning the notifier, or None when no bot token is set."""
    if not settings.telegram_bot_token:
        return None
    return TelegramNotifier(settings.telegram_bot_token)


def subscription_message(end_date: datetime) -> str:
    return (
        "✅ Оплата прошла успешно!\n"
        f"Ваша подписка активирована до {end_date.strftime('%d.%m.%Y')}."
    )


async def send_with_retry(
    notifier: TelegramNotifier,
    chat_id: str,
    text: str,
    attempts: Optional[int] = None,
    delay: Optional[float] = None,
) -> bool:
    """
    Deliver a message with a bounded number of attempts.
    Never raises: the caller's result must not depend on delivery.

    Returns:
        True if a send attempt succeeded
    """
    attempts = max(1, attempts if attempts is not None else settings.notification_attempts)
    delay = settings.notification_retry_delay if delay is None else delay

    for attempt in range(1, attempts + 1):
        try:
            await notifier.send_message(chat_id, text)
            logger.info(f"Notification sent to chat {chat_id}")
            return True
        except Exception as e:
            logger.warning(f"Notification to chat {chat_id} failed (attempt {attempt}/{attempts}): {e}")
            if attempt < attempts and delay > 0:
                await asyncio.sleep(delay * attempt)

    logger.error(f"Giving up on notification to chat {chat_id} after {attempts} attempts")
    return False


async def notify_subscription_activated(notifier: TelegramNotifier, chat_id: str, end_date: datetime) -> bool:
    """Background task run after the webhook has committed."""
    return await send_with_retry(notifier, chat_id, subscription_message(end_date))
