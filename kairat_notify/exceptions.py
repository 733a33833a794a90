"""Exceptions raised by the Kairat Notify bot."""
from typing import Iterable, List, Optional

from .models import TrackedEvent


class KairatNotifyError(Exception):
    """Base class for all errors of this package."""


class FetchError(KairatNotifyError):
    """The match page could not be retrieved (transport, timeout, non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(KairatNotifyError):
    """The match page was retrieved but its expected structure is missing."""


class EventNotFoundError(ExtractionError):
    """One of the tracked matches is not present on the page."""

    def __init__(self, event: TrackedEvent):
        super().__init__(f"Match against {event.opponent} not found on the page")
        self.event = event


class DeliveryError(KairatNotifyError):
    """A Telegram API call failed."""


class ConfigError(KairatNotifyError):
    """Configuration is missing or invalid."""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        super().__init__(message)
        self.missing: List[str] = list(missing)
