"""Tests for notification channels and configuration."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from yieldramp.config import Settings
from yieldramp.notifications import close_notifiers, get_notifier
from yieldramp.notifications import telegram
from yieldramp.notifications.base import LoggingNotifier
from yieldramp.notifications.telegram import TelegramNotifier


class TestTelegramNotifier:
    """Tests for the Telegram channel."""

    @pytest.mark.asyncio
    async def test_success_sends_escaped_text(self):
        mock_bot = AsyncMock()
        mock_bot.send_message = AsyncMock(return_value=True)
        notifier = TelegramNotifier(chat_id=42, bot=mock_bot)

        result = await notifier.success("Deposit <25> USDC done")

        assert result is True
        mock_bot.send_message.assert_called_once()
        kwargs = mock_bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["text"] == "Deposit &lt;25&gt; USDC done"
        assert kwargs["parse_mode"] == "HTML"

    @pytest.mark.asyncio
    async def test_error_has_heading(self):
        mock_bot = AsyncMock()
        notifier = TelegramNotifier(chat_id=42, bot=mock_bot)

        await notifier.error("Transaction approval timed out.")

        text = mock_bot.send_message.call_args.kwargs["text"]
        assert text.startswith("<b>Error</b>")
        assert "Transaction approval timed out." in text

    @pytest.mark.asyncio
    async def test_confirm_delivers_prompt_and_declines(self):
        mock_bot = AsyncMock()
        notifier = TelegramNotifier(chat_id=42, bot=mock_bot)

        confirmed = await notifier.confirm("Complete Withdrawal", "Ready.")

        assert confirmed is False
        assert "<b>Complete Withdrawal</b>" in mock_bot.send_message.call_args.kwargs["text"]

    @pytest.mark.asyncio
    async def test_send_failure_returns_false(self):
        mock_bot = AsyncMock()
        mock_bot.send_message = AsyncMock(side_effect=RuntimeError("network"))
        notifier = TelegramNotifier(chat_id=42, bot=mock_bot)

        assert await notifier.success("hello") is False

    @pytest.mark.asyncio
    async def test_no_bot_configured(self):
        notifier = TelegramNotifier(chat_id=42)

        with patch("yieldramp.notifications.telegram.get_bot", return_value=None):
            assert await notifier.success("hello") is False


class TestCloseNotifiers:
    """Tests for releasing the shared bot session."""

    @pytest.mark.asyncio
    async def test_closes_and_forgets_bot(self, monkeypatch):
        mock_bot = MagicMock()
        mock_bot.session.close = AsyncMock()
        monkeypatch.setattr(telegram, "_bot_instance", mock_bot)

        await close_notifiers()

        mock_bot.session.close.assert_awaited_once()
        assert telegram._bot_instance is None

    @pytest.mark.asyncio
    async def test_noop_without_bot(self, monkeypatch):
        monkeypatch.setattr(telegram, "_bot_instance", None)

        await close_notifiers()

        assert telegram._bot_instance is None


class TestLoggingNotifier:
    """Tests for the log channel."""

    @pytest.mark.asyncio
    async def test_logs_and_declines_confirm(self, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level("INFO"):
            assert await notifier.success("all good") is True
            assert await notifier.error("went wrong") is True
            assert await notifier.confirm("Title", "Body") is False

        assert "all good" in caplog.text
        assert "went wrong" in caplog.text
        assert "Title: Body" in caplog.text


class TestGetNotifier:
    """Tests for notifier selection."""

    def test_logging_without_telegram(self):
        assert isinstance(get_notifier(Settings(telegram_bot_token="")), LoggingNotifier)

    def test_telegram_when_configured(self):
        settings = Settings(telegram_bot_token="123:abc", telegram_chat_id=99)

        notifier = get_notifier(settings)

        assert isinstance(notifier, TelegramNotifier)
        assert notifier.chat_id == 99


class TestSettings:
    """Tests for settings defaults and redaction."""

    def test_defaults(self):
        settings = Settings(moonpay_api_key="", telegram_bot_token="")

        assert settings.transaction_timeout_seconds == 30.0
        assert settings.withdrawal_maturation_seconds == 86400
        assert str(settings.min_withdraw_amount) == "1"
        assert not settings.has_telegram

    def test_safe_dict_redacts_secrets(self):
        settings = Settings(moonpay_api_key="pk_live_secret", telegram_bot_token="123:abc")

        safe = settings.get_safe_dict()

        assert safe["moonpay"]["api_key"] == "pk_live_***"
        assert safe["telegram_bot_token"] == "***"
        assert "secret" not in str(safe)

    def test_declared_fields(self):
        assert set(Settings.model_fields) == {
            "debug",
            "server_url",
            "http_timeout_seconds",
            "transaction_timeout_seconds",
            "withdrawal_maturation_seconds",
            "min_withdraw_amount",
            "usdc_mint",
            "moonpay_api_key",
            "moonpay_environment",
            "brand_color",
            "telegram_bot_token",
            "telegram_chat_id",
        }
