"""
Configuration settings for the application
"""
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGS_DIR = Path("./logs")

# Subscription granted by a successful payment
SUBSCRIPTION_PLAN_MONTHLY = "Месячная"
SUBSCRIPTION_DAYS = 30


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Allow both field name and alias
        extra="ignore",
    )

    # Server
    port: int = Field(default=3001, alias="PORT")

    # Infrastructure configuration
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./academy.db", alias="DATABASE_URL")

    # YooKassa payment gateway
    yookassa_shop_id: Optional[str] = Field(default=None, alias="YOOKASSA_SHOP_ID")
    yookassa_secret_key: Optional[str] = Field(default=None, alias="YOOKASSA_SECRET_KEY")
    yookassa_api_url: str = Field(default="https://api.yookassa.ru/v3", alias="YOOKASSA_API_URL")
    payment_return_url: str = Field(
        default="https://academycg.online/payment-success",
        alias="PAYMENT_RETURN_URL"
    )
    gateway_timeout: float = Field(default=30.0, alias="GATEWAY_TIMEOUT")

    # Telegram notifications
    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    notification_attempts: int = Field(default=3, alias="NOTIFICATION_ATTEMPTS")
    notification_retry_delay: float = Field(default=1.0, alias="NOTIFICATION_RETRY_DELAY")

    # Frontend configuration
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    static_dir: str = Field(default="./public", alias="STATIC_DIR")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def gateway_configured(self) -> bool:
        return bool(self.yookassa_shop_id and self.yookassa_secret_key)


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.env and settings.env.lower() == "production")
