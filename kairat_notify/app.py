"""
Main application module for Kairat Notify.
"""
import asyncio
import logging
import signal
from typing import List, Optional

from .commands import CommandListener
from .exceptions import DeliveryError
from .models import TRACKED_EVENTS, AppConfig, CommandAction, RunState, Snapshot, describe
from .notifications import Notifier, TelegramClient
from .scheduling import PeriodicTask
from .scraper import PageScraper

logger = logging.getLogger(__name__)


class TicketMonitor:
    """Watches the match page and tells the operator when tickets go on sale."""

    def __init__(
        self,
        config: AppConfig,
        scraper: Optional[PageScraper] = None,
        notifier: Optional[Notifier] = None,
        telegram: Optional[TelegramClient] = None,
    ):
        """Initialize with application configuration.

        The scraper, notifier and Telegram client are built from ``config``
        unless given.
        """
        self.config = config
        self.chat_id = config.notification.chat_id
        self.telegram = telegram or TelegramClient(config.notification)
        self.scraper = scraper or PageScraper(config.scraper)
        self.notifier = notifier or Notifier(self.telegram)
        self.state = RunState()
        self.listener: Optional[CommandListener] = None
        self.shutdown_event = asyncio.Event()

    def _handle_shutdown(self, signum: int) -> None:
        """Handle shutdown signals gracefully."""
        logger.warning(f"🛑 Received {signal.Signals(signum).name}, shutting down gracefully...")
        self.shutdown_event.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._handle_shutdown, signum)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(
                    signum,
                    lambda s, _frame: loop.call_soon_threadsafe(self._handle_shutdown, s),
                )

    async def check_and_notify(self) -> None:
        """Run one check cycle: fetch, diff against the previous snapshot, notify.

        Errors never escape; they are reported to the operator instead.
        """
        if self.state.is_checking:
            logger.info("⏳ Check already in progress, skipping...")
            return

        self.state.is_checking = True
        try:
            logger.info("🔍 Starting status check...")
            snapshot = await self.scraper.fetch_with_retry()

            if self.state.previous_snapshot is None:
                logger.info("📝 Initial status check - no notifications sent")
            else:
                await self._notify_transitions(self.state.previous_snapshot, snapshot)

            self.state.previous_snapshot = snapshot
            logger.info(f"✅ Check completed: {describe(snapshot)}")
        except Exception as e:
            logger.error(f"❌ Error during status check: {e}", exc_info=True)
            await self._report_error(str(e) or type(e).__name__)
        finally:
            self.state.is_checking = False

    async def _notify_transitions(self, previous: Snapshot, current: Snapshot) -> None:
        for event in newly_available(previous, current):
            logger.warning(f"🎫 {event.title}: tickets became available!")
            try:
                await self.notifier.send_status_change(
                    self.chat_id, event.title, current[event.key].link
                )
            except DeliveryError as e:
                logger.error(f"❌ Failed to send status change for {event.title}: {e}")
                await self._report_error(str(e))

    async def send_operational(self) -> None:
        """Send the periodic "still alive" message."""
        logger.info("📢 Sending operational notification")
        try:
            await self.notifier.send_operational(self.chat_id)
        except DeliveryError as e:
            logger.error(f"❌ Failed to send operational notification: {e}")

    async def handle_command(self, action: CommandAction, chat_id: str) -> None:
        """Answer a command from the allow-listed chat."""
        if action is CommandAction.STATUS:
            await self.send_manual_status(chat_id)
        elif action is CommandAction.HELP:
            try:
                await self.notifier.send_help(chat_id, self.config.schedule)
            except DeliveryError as e:
                logger.error(f"❌ Failed to send help message: {e}")

    async def send_manual_status(self, chat_id: str) -> None:
        """Fetch the page now and report both matches. Leaves the run state alone."""
        logger.info("📱 Manual status check requested")
        try:
            snapshot = await self.scraper.fetch_with_retry()
            await self.notifier.send_manual_status(
                chat_id, snapshot, self.config.scraper.page_url
            )
        except DeliveryError as e:
            logger.error(f"❌ Failed to send manual status: {e}")
        except Exception as e:
            logger.error(f"❌ Error during manual status check: {e}")
            await self._report_error(str(e) or type(e).__name__, chat_id)

    async def _report_error(self, error_text: str, chat_id: Optional[str] = None) -> None:
        try:
            await self.notifier.send_error(chat_id or self.chat_id, error_text)
        except DeliveryError as e:
            logger.error(f"❌ Failed to send error notification: {e}")

    def create_tasks(self) -> List[PeriodicTask]:
        schedule = self.config.schedule
        return [
            PeriodicTask("status check", schedule.check_interval_seconds, self.check_and_notify),
            PeriodicTask(
                "operational notification",
                schedule.operational_interval_seconds,
                self.send_operational,
            ),
        ]

    async def start(self) -> None:
        """Announce startup and take the baseline snapshot."""
        logger.info("🚀 Starting Kairat Notify Bot...")
        logger.info(f"💬 Chat ID: {self.chat_id}")
        await self.notifier.send_startup(self.chat_id, self.config.schedule)

        logger.info("🔍 Performing initial status check...")
        await self.check_and_notify()

    async def run(self) -> None:
        """Run until SIGINT/SIGTERM."""
        self.install_signal_handlers()
        try:
            await self.start()

            listener = self.listener = CommandListener(
                self.telegram, self.chat_id, self.handle_command
            )
            tasks = self.create_tasks()
            running = [asyncio.ensure_future(task.run()) for task in tasks]
            running.append(asyncio.ensure_future(listener.run()))

            schedule = self.config.schedule
            logger.info("✅ Bot started successfully!")
            logger.info(f"⏰ Monitoring every {schedule.check_interval:g} minutes...")
            logger.info(f"📢 Operational notifications every {schedule.operational_interval:g} hours...")
            logger.info("💡 Send /status to check manually")

            await self.shutdown_event.wait()

            listener.stop()
            for task in tasks:
                task.stop()
            await asyncio.gather(*running)
        finally:
            await self.telegram.aclose()

        logger.info("✅ Kairat Notify Bot stopped")


def newly_available(previous: Snapshot, current: Snapshot):
    """Tracked events that went from unavailable to available."""
    return [
        event
        for event in TRACKED_EVENTS
        if not previous[event.key].is_available and current[event.key].is_available
    ]
