"""
Telegram notifications for the Kairat Notify bot.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import DeliveryError
from .models import (
    TRACKED_EVENTS,
    AvailabilityStatus,
    NotificationConfig,
    ScheduleConfig,
    Snapshot,
)

logger = logging.getLogger(__name__)

DISPLAY_TZ = timezone(timedelta(hours=5), "GMT+5")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Render ``now`` (default: current time) in GMT+5 to the minute."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(DISPLAY_TZ).strftime(TIMESTAMP_FORMAT)


def _format_minutes(minutes: float) -> str:
    return f"{minutes:g} мин."


def _format_hours(hours: float) -> str:
    return f"{hours:g} ч."


def _format_status(status: AvailabilityStatus) -> str:
    if status.is_available:
        return f"✅ Включено (Ссылка: {status.link})"
    return "❌ Отключено"


def format_status_change(title: str, link: str) -> str:
    return f'🎫 Для события "{title}" статус изменился, билеты в продаже!\n\n🔗 Ссылка: {link}'


def format_operational(timestamp: str) -> str:
    return f"✅ Все работает корректно, без ошибок.\n\n🕐 Последний запрос: {timestamp} (GMT+5)"


def format_error(error_text: str, timestamp: str) -> str:
    return f"❌ Возникла ошибка во время запроса:\n\n{error_text}\n\n🕐 Время: {timestamp} (GMT+5)"


def format_manual_status(snapshot: Snapshot, timestamp: str, source_url: str) -> str:
    lines = ["📊 Текущий статус билетов:", ""]
    for event in TRACKED_EVENTS:
        lines.append(f"🎯 {event.title}: {_format_status(snapshot[event.key])}")
    lines += ["", f"🕐 Время проверки: {timestamp} (GMT+5)", "", f"Источник: {source_url}"]
    return "\n".join(lines)


def format_startup(timestamp: str, schedule: ScheduleConfig) -> str:
    return (
        "🚀 Kairat Notify Bot запущен!\n\n"
        f"📅 Время запуска: {timestamp} (GMT+5)\n"
        f"⏰ Проверка каждые {_format_minutes(schedule.check_interval)}\n"
        f"📢 Операционные уведомления каждые {_format_hours(schedule.operational_interval)}\n\n"
        "💡 Используйте /status для ручной проверки"
    )


def format_help(schedule: ScheduleConfig) -> str:
    events = "\n".join(f"• {event.title}" for event in TRACKED_EVENTS)
    return (
        "🤖 Kairat Notify Bot - Справка\n\n"
        "📋 Доступные команды:\n"
        "• /status - Проверить текущий статус билетов\n"
        "• /help - Показать эту справку\n\n"
        "⏰ Автоматические проверки:\n"
        f"• Каждые {_format_minutes(schedule.check_interval)} - проверка статуса\n"
        f"• Каждые {_format_hours(schedule.operational_interval)} - операционное уведомление\n\n"
        f"🎫 События:\n{events}\n\n"
        '🔔 Уведомления приходят только при изменении статуса с "отключено" на "включено"'
    )


class TelegramClient:
    """Minimal client for the Telegram Bot HTTP API."""

    def __init__(self, config: NotificationConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or httpx.AsyncClient()
        self.base_url = f"{config.api_base}/bot{config.bot_token}"

    async def aclose(self) -> None:
        await self.client.aclose()

    async def send_message(self, chat_id: str, text: str) -> Dict[str, Any]:
        """Send a plain text message. Raises DeliveryError on any failure."""
        return await self._call(
            "sendMessage",
            {"chat_id": chat_id, "text": text},
            timeout=self.config.timeout,
        )

    async def get_updates(self, offset: Optional[int] = None) -> List[Dict[str, Any]]:
        """Long-poll for new updates starting at ``offset``."""
        payload: Dict[str, Any] = {"timeout": self.config.poll_timeout}
        if offset is not None:
            payload["offset"] = offset
        # the HTTP timeout must outlive the long poll
        return await self._call(
            "getUpdates", payload, timeout=self.config.poll_timeout + self.config.timeout
        )

    async def _call(self, method: str, payload: Dict[str, Any], timeout: float) -> Any:
        try:
            response = await self.client.post(
                f"{self.base_url}/{method}", json=payload, timeout=timeout
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"Telegram {method} failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise DeliveryError(f"Telegram {method} failed: {str(e) or type(e).__name__}") from e

        if not isinstance(data, dict):
            raise DeliveryError(f"Telegram {method} returned an unexpected payload")
        if not data.get("ok"):
            raise DeliveryError(
                f"Telegram {method} rejected: {data.get('description', 'unknown error')}"
            )
        return data.get("result")


class Notifier:
    """Formats and delivers the bot's messages. Never retries."""

    def __init__(self, client: TelegramClient):
        self.client = client

    async def send_notification(self, chat_id: str, message: str) -> None:
        try:
            await self.client.send_message(chat_id, message)
        except DeliveryError as e:
            logger.error(f"Failed to send notification: {e}")
            raise
        logger.info(f"Notification sent: {message}")

    async def send_status_change(self, chat_id: str, title: str, link: str) -> None:
        await self.send_notification(chat_id, format_status_change(title, link))

    async def send_operational(self, chat_id: str) -> None:
        await self.send_notification(chat_id, format_operational(format_timestamp()))

    async def send_error(self, chat_id: str, error_text: str) -> None:
        await self.send_notification(chat_id, format_error(error_text, format_timestamp()))

    async def send_manual_status(self, chat_id: str, snapshot: Snapshot, source_url: str) -> None:
        await self.send_notification(
            chat_id, format_manual_status(snapshot, format_timestamp(), source_url)
        )

    async def send_startup(self, chat_id: str, schedule: ScheduleConfig) -> None:
        await self.send_notification(chat_id, format_startup(format_timestamp(), schedule))

    async def send_help(self, chat_id: str, schedule: ScheduleConfig) -> None:
        await self.send_notification(chat_id, format_help(schedule))
