"""Notification dispatcher interface."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Dispatches user-facing success and error notifications."""

    @abstractmethod
    async def success(self, message: str) -> bool:
        """Show a success/info notification. Returns True if delivered."""
        pass

    @abstractmethod
    async def error(self, message: str) -> bool:
        """Show an error notification. Returns True if delivered."""
        pass

    async def confirm(self, title: str, message: str) -> bool:
        """Ask the user to confirm an action.

        Channels that cannot collect an answer only deliver the prompt and
        return False.
        """
        await self.success(f"{title}: {message}")
        return False


class LoggingNotifier(Notifier):
    """Writes notifications to the log. Used when no channel is configured."""

    async def success(self, message: str) -> bool:
        logger.info(f"[notify] {message}")
        return True

    async def error(self, message: str) -> bool:
        logger.error(f"[notify] {message}")
        return True
