"""Tests for the notifications module."""
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from conftest import make_snapshot
from kairat_notify.exceptions import DeliveryError
from kairat_notify.models import NotificationConfig, ScheduleConfig
from kairat_notify.notifications import (
    Notifier,
    TelegramClient,
    format_error,
    format_help,
    format_manual_status,
    format_startup,
    format_status_change,
    format_timestamp,
)


def test_format_timestamp_uses_gmt_plus_5():
    """Timestamps are shifted to GMT+5 and cut to the minute."""
    now = datetime(2025, 7, 1, 19, 30, 59, tzinfo=timezone.utc)
    assert format_timestamp(now) == "2025-07-02 00:30"


def test_format_status_change():
    """The status-change message names the event and carries the link."""
    message = format_status_change("Матч с Актобе", "https://x/a")
    assert '"Матч с Актобе"' in message
    assert "https://x/a" in message


def test_format_error():
    message = format_error("HTTP error: boom", "2025-07-02 00:30")
    assert "HTTP error: boom" in message
    assert "2025-07-02 00:30 (GMT+5)" in message


def test_format_manual_status():
    """Both matches are listed with either their link or the disabled marker."""
    snapshot = make_snapshot(aktobe=(True, "https://x/a"))
    message = format_manual_status(snapshot, "2025-07-02 00:30", "https://fckairat.com/match")

    assert "Матч с Актобе: ✅ Включено (Ссылка: https://x/a)" in message
    assert "Матч с Реал Мадрид: ❌ Отключено" in message
    assert "2025-07-02 00:30" in message
    assert "Источник: https://fckairat.com/match" in message


def test_startup_and_help_use_configured_intervals():
    """Intervals come from the schedule, not from hardcoded text."""
    schedule = ScheduleConfig(check_interval=4, operational_interval=6)

    startup = format_startup("2025-07-02 00:30", schedule)
    help_text = format_help(schedule)

    assert "2025-07-02 00:30" in startup
    assert "4 мин." in startup and "6 ч." in startup
    assert "/status" in startup
    assert "4 мин." in help_text and "6 ч." in help_text
    assert "/help" in help_text
    assert "Матч с Реал Мадрид" in help_text


class TestTelegramClient:
    """Tests for the TelegramClient class."""

    @pytest.fixture
    def config(self):
        return NotificationConfig(bot_token="123:abc", chat_id="42", poll_timeout=1)

    @staticmethod
    def make_client(config, handler):
        return TelegramClient(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    @pytest.mark.asyncio
    async def test_send_message(self, config):
        """sendMessage is posted to the bot's endpoint."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

        client = self.make_client(config, handler)
        result = await client.send_message("42", "hello")

        assert result == {"message_id": 1}
        assert str(requests[0].url) == "https://api.telegram.org/bot123:abc/sendMessage"
        assert json.loads(requests[0].content) == {"chat_id": "42", "text": "hello"}

    @pytest.mark.asyncio
    async def test_send_message_http_error(self, config):
        """HTTP failures raise DeliveryError."""
        client = self.make_client(config, lambda request: httpx.Response(400, json={"ok": False}))

        with pytest.raises(DeliveryError, match="status 400"):
            await client.send_message("42", "hello")

    @pytest.mark.asyncio
    async def test_send_message_rejected(self, config):
        """A 200 response with ok=false raises DeliveryError."""
        client = self.make_client(
            config,
            lambda request: httpx.Response(200, json={"ok": False, "description": "chat not found"}),
        )

        with pytest.raises(DeliveryError, match="chat not found"):
            await client.send_message("42", "hello")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, config):
        """A JSON body that is not an object raises DeliveryError."""
        client = self.make_client(config, lambda request: httpx.Response(200, json=[]))

        with pytest.raises(DeliveryError, match="unexpected payload"):
            await client.get_updates()

    @pytest.mark.asyncio
    async def test_send_message_transport_error(self, config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self.make_client(config, handler)

        with pytest.raises(DeliveryError, match="connection refused"):
            await client.send_message("42", "hello")

    @pytest.mark.asyncio
    async def test_get_updates(self, config):
        """getUpdates sends the offset and returns the result list."""
        payloads = []

        def handler(request):
            payloads.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "result": [{"update_id": 7}]})

        client = self.make_client(config, handler)
        updates = await client.get_updates(offset=7)

        assert updates == [{"update_id": 7}]
        assert payloads == [{"timeout": 1, "offset": 7}]


class TestNotifier:
    """Tests for the Notifier class."""

    @pytest.fixture
    def client(self):
        return AsyncMock(spec=TelegramClient)

    @pytest.fixture
    def notifier(self, client):
        return Notifier(client)

    @pytest.mark.asyncio
    async def test_send_status_change(self, notifier, client):
        await notifier.send_status_change("42", "Матч с Актобе", "https://x/a")

        client.send_message.assert_awaited_once()
        chat_id, text = client.send_message.await_args.args
        assert chat_id == "42"
        assert "https://x/a" in text

    @pytest.mark.asyncio
    async def test_send_operational(self, notifier, client):
        """The operational message carries the current GMT+5 time."""
        with patch("kairat_notify.notifications.format_timestamp", return_value="2025-07-02 00:30"):
            await notifier.send_operational("42")

        _, text = client.send_message.await_args.args
        assert "2025-07-02 00:30 (GMT+5)" in text

    @pytest.mark.asyncio
    async def test_send_manual_status(self, notifier, client):
        await notifier.send_manual_status("42", make_snapshot(), "https://fckairat.com/match")

        _, text = client.send_message.await_args.args
        assert text.count("❌ Отключено") == 2

    @pytest.mark.asyncio
    async def test_delivery_error_propagates(self, notifier, client):
        """Delivery failures are logged and re-raised, never retried."""
        client.send_message.side_effect = DeliveryError("Telegram sendMessage failed")

        with patch("kairat_notify.notifications.logger") as mock_logger:
            with pytest.raises(DeliveryError):
                await notifier.send_error("42", "boom")

        assert client.send_message.await_count == 1
        mock_logger.error.assert_called()
