"""User-facing notification channels."""

from typing import Optional

from yieldramp.config import Settings, get_settings
from yieldramp.notifications.base import LoggingNotifier, Notifier


def get_notifier(settings: Optional[Settings] = None) -> Notifier:
    """Telegram when a bot and chat are configured, the log otherwise."""
    settings = settings or get_settings()
    if settings.has_telegram:
        from yieldramp.notifications.telegram import TelegramNotifier

        return TelegramNotifier(chat_id=settings.telegram_chat_id)
    return LoggingNotifier()


async def close_notifiers() -> None:
    """Release the shared Telegram bot session (call on shutdown)."""
    from yieldramp.notifications.telegram import close_bot

    await close_bot()


__all__ = ["LoggingNotifier", "Notifier", "close_notifiers", "get_notifier"]
