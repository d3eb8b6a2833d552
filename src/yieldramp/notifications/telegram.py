"""Telegram notification channel.

Sends wallet notifications (approval prompts, deposit and withdrawal
results) to a configured chat. Uses a singleton pattern to share the bot
instance.
"""

import asyncio
import html
import logging
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from yieldramp.config import get_settings
from yieldramp.notifications.base import Notifier

logger = logging.getLogger(__name__)

# Singleton bot instance
_bot_instance: Optional[Bot] = None
_bot_lock = asyncio.Lock()


async def get_bot() -> Optional[Bot]:
    """Get or create the bot instance for notifications."""
    global _bot_instance

    if _bot_instance is not None:
        return _bot_instance

    async with _bot_lock:
        # Double-check after acquiring lock
        if _bot_instance is not None:
            return _bot_instance

        settings = get_settings()
        if not settings.telegram_bot_token:
            logger.warning("Telegram bot token not configured - notifications disabled")
            return None

        _bot_instance = Bot(token=settings.telegram_bot_token)
        return _bot_instance


async def close_bot() -> None:
    """Close the shared bot session and forget the instance."""
    global _bot_instance
    if _bot_instance is not None:
        await _bot_instance.session.close()
        _bot_instance = None


class TelegramNotifier(Notifier):
    """Delivers notifications to one Telegram chat."""

    def __init__(self, chat_id: int, bot: Optional[Bot] = None):
        """Initialize with the target chat and optional bot instance.

        If no bot provided, will use the singleton instance.
        """
        self.chat_id = chat_id
        self._bot = bot

    async def _get_bot(self) -> Optional[Bot]:
        if self._bot:
            return self._bot
        return await get_bot()

    async def send_message(self, message: str, parse_mode: Optional[str] = "HTML") -> bool:
        """Send a message to the configured chat.

        Returns:
            True if message was sent successfully
        """
        bot = await self._get_bot()
        if not bot:
            logger.warning("Cannot send notification - bot not initialized")
            return False

        try:
            await bot.send_message(chat_id=self.chat_id, text=message, parse_mode=parse_mode)
            return True
        except TelegramForbiddenError:
            logger.warning(f"Chat {self.chat_id} has blocked the bot")
            return False
        except TelegramBadRequest as e:
            logger.error(f"Bad request sending to {self.chat_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to send notification to {self.chat_id}: {e}")
            return False

    async def success(self, message: str) -> bool:
        return await self.send_message(html.escape(message))

    async def error(self, message: str) -> bool:
        return await self.send_message(f"<b>Error</b>\n\n{html.escape(message)}")

    async def confirm(self, title: str, message: str) -> bool:
        # Chat replies are not collected, the user completes from the app
        await self.send_message(f"<b>{html.escape(title)}</b>\n\n{html.escape(message)}")
        return False
