"""Application configuration using pydantic-settings.

Covers the yield backend, the onramp widget and the notification channel.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Runtime
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Yield backend
    # ======================
    server_url: str = Field(
        default="http://localhost:8080", description="Base URL of the yield backend"
    )
    http_timeout_seconds: float = Field(
        default=15.0, description="Timeout for a single backend HTTP request"
    )
    transaction_timeout_seconds: float = Field(
        default=30.0, description="Deadline for wallet approval and submission"
    )
    withdrawal_maturation_seconds: int = Field(
        default=24 * 3600, description="Delay between initiating and completing a withdrawal"
    )
    min_withdraw_amount: Decimal = Field(
        default=Decimal("1"), description="Minimum withdrawal amount in USDC"
    )

    # ======================
    # Solana
    # ======================
    usdc_mint: str = Field(
        default="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        description="USDC token mint on Solana mainnet",
    )

    # ======================
    # Onramp widget
    # ======================
    moonpay_api_key: str = Field(default="", description="MoonPay publishable API key")
    moonpay_environment: str = Field(
        default="sandbox", description="MoonPay environment (sandbox or production)"
    )
    brand_color: str = Field(default="#1D9BF0", description="Widget accent colour")

    # ======================
    # Notifications
    # ======================
    telegram_bot_token: str = Field(default="", description="Telegram bot token from BotFather")
    telegram_chat_id: Optional[int] = Field(
        default=None, description="Chat that receives wallet notifications"
    )

    @property
    def has_telegram(self) -> bool:
        """Check if Telegram notifications are configured."""
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "debug": self.debug,
            "server_url": self.server_url,
            "transaction_timeout_seconds": self.transaction_timeout_seconds,
            "withdrawal_maturation_seconds": self.withdrawal_maturation_seconds,
            "min_withdraw_amount": str(self.min_withdraw_amount),
            "moonpay": {
                "api_key": self._redact_key(self.moonpay_api_key),
                "environment": self.moonpay_environment,
            },
            "telegram_bot_token": "***" if self.telegram_bot_token else "(not set)",
            "telegram_chat_id": self.telegram_chat_id or "(not set)",
        }

    @staticmethod
    def _redact_key(key: str) -> str:
        """Keep the pk_test_/pk_live_ prefix visible, hide the rest."""
        if not key:
            return "(not set)"
        for prefix in ("pk_test_", "pk_live_"):
            if key.startswith(prefix):
                return f"{prefix}***"
        return "***"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
