"""
Inbound Telegram commands.
"""
import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Optional

from .exceptions import DeliveryError
from .models import CommandAction
from .notifications import TelegramClient

logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"^/(status|help)(?:@\w+)?(?:\s|$)", re.IGNORECASE)

CommandHandler = Callable[[CommandAction, str], Awaitable[None]]


def dispatch(sender_id: str, text: str, allowed_chat_id: str) -> CommandAction:
    """Decide what to do with a message from ``sender_id``.

    Only the allow-listed chat is ever answered; everything else is ignored.
    """
    match = COMMAND_PATTERN.match((text or "").strip())
    if str(sender_id) != str(allowed_chat_id):
        if match:
            logger.warning(f"🚫 Unauthorized access attempt from chat ID: {sender_id}")
        return CommandAction.IGNORE

    if not match:
        return CommandAction.IGNORE
    return CommandAction(match.group(1).lower())


class CommandListener:
    """Long-polls Telegram for commands and hands them to a handler."""

    def __init__(
        self,
        client: TelegramClient,
        allowed_chat_id: str,
        handler: CommandHandler,
        error_pause: float = 5.0,
    ):
        self.client = client
        self.allowed_chat_id = allowed_chat_id
        self.handler = handler
        self.error_pause = error_pause
        self.offset: Optional[int] = None
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def run(self) -> None:
        """Poll until stop() is called."""
        logger.info("👂 Listening for Telegram commands")
        while not self.stopped:
            poll = asyncio.ensure_future(self.client.get_updates(self.offset))
            stop = asyncio.ensure_future(self._stop_event.wait())
            done, _ = await asyncio.wait({poll, stop}, return_when=asyncio.FIRST_COMPLETED)

            if poll not in done:
                poll.cancel()
                await asyncio.gather(poll, return_exceptions=True)
                break
            stop.cancel()

            try:
                updates = poll.result()
            except DeliveryError as e:
                logger.error(f"❌ Telegram polling error: {e}")
                await self._pause()
                continue

            for update in updates:
                await self.process_update(update)

        logger.info("Command listener stopped")

    async def process_update(self, update: Dict[str, Any]) -> CommandAction:
        """Handle one update from getUpdates and advance the offset."""
        update_id = update.get("update_id")
        if update_id is not None:
            self.offset = update_id + 1

        message = update.get("message") or update.get("edited_message")
        if not message:
            return CommandAction.IGNORE

        chat_id = str(message.get("chat", {}).get("id", ""))
        action = dispatch(chat_id, message.get("text") or "", self.allowed_chat_id)
        if action is CommandAction.IGNORE:
            return action

        logger.info(f"📱 Command received: /{action.value}")
        await self.handler(action, chat_id)
        return action

    async def _pause(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.error_pause)
        except asyncio.TimeoutError:
            pass
