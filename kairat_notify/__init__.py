"""Kairat Notify package.

Watches the FC Kairat match page and sends a Telegram message when tickets
for a tracked match go on sale.
"""

__version__ = "0.1.0"

# Import key components to make them available at the package level
from .app import TicketMonitor
from .exceptions import (
    ConfigError,
    DeliveryError,
    EventNotFoundError,
    ExtractionError,
    FetchError,
)
from .models import AppConfig, AvailabilityStatus, Snapshot, TRACKED_EVENTS
from .notifications import Notifier, TelegramClient
from .scraper import PageScraper

__all__ = [
    'TicketMonitor',
    'AppConfig',
    'AvailabilityStatus',
    'Snapshot',
    'TRACKED_EVENTS',
    'Notifier',
    'TelegramClient',
    'PageScraper',
    'ConfigError',
    'DeliveryError',
    'EventNotFoundError',
    'ExtractionError',
    'FetchError',
]
