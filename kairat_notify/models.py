"""Data models and types for the Kairat Notify bot."""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple


@dataclass(frozen=True)
class TrackedEvent:
    """A match whose ticket button is watched on the page."""
    key: str
    opponent: str  # name as printed in the match block
    title: str  # name used in messages


AKTOBE = TrackedEvent(key="aktobe", opponent="Актобе", title="Матч с Актобе")
REAL_MADRID = TrackedEvent(
    key="realMadrid", opponent="Реал Мадрид", title="Матч с Реал Мадрид"
)

TRACKED_EVENTS: Tuple[TrackedEvent, ...] = (AKTOBE, REAL_MADRID)


@dataclass(frozen=True)
class AvailabilityStatus:
    """State of the ticket button for one match."""
    is_available: bool
    link: str = ""


class Snapshot(Mapping[str, AvailabilityStatus]):
    """Availability of every tracked event, as seen by one fetch.

    Always holds exactly the keys of TRACKED_EVENTS.
    """

    def __init__(self, statuses: Mapping[str, AvailabilityStatus]):
        expected = {event.key for event in TRACKED_EVENTS}
        missing = expected - set(statuses)
        extra = set(statuses) - expected
        if missing or extra:
            raise ValueError(
                f"Snapshot keys mismatch (missing={sorted(missing)}, extra={sorted(extra)})"
            )
        self._statuses = MappingProxyType(dict(statuses))

    def __getitem__(self, key: str) -> AvailabilityStatus:
        return self._statuses[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._statuses)

    def __len__(self) -> int:
        return len(self._statuses)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snapshot):
            return dict(self._statuses) == dict(other._statuses)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._statuses.items())))

    def __repr__(self) -> str:
        return f"Snapshot({dict(self._statuses)!r})"


@dataclass
class RunState:
    """Mutable state of the change detector. Owned by TicketMonitor."""
    previous_snapshot: Optional[Snapshot] = None
    is_checking: bool = False


class CommandAction(Enum):
    """What to do with an inbound chat message."""
    IGNORE = "ignore"
    STATUS = "status"
    HELP = "help"


@dataclass
class ScraperConfig:
    """Configuration for the page scraper."""
    page_url: str = "https://fckairat.com/match"
    timeout: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/91.0.4472.124 Safari/537.36"
    )
    retry_delay: float = 2.0  # seconds


@dataclass
class NotificationConfig:
    """Configuration for the Telegram bot."""
    bot_token: str = ""
    chat_id: str = ""
    api_base: str = "https://api.telegram.org"
    timeout: float = 10.0
    poll_timeout: int = 30  # seconds, getUpdates long polling


@dataclass
class ScheduleConfig:
    """Intervals of the periodic jobs."""
    check_interval: float = 2.0  # minutes
    operational_interval: float = 3.0  # hours

    @property
    def check_interval_seconds(self) -> float:
        return self.check_interval * 60

    @property
    def operational_interval_seconds(self) -> float:
        return self.operational_interval * 3600


@dataclass
class AppConfig:
    """Main application configuration."""
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    log_level: str = "INFO"


def describe(snapshot: Snapshot) -> Dict[str, str]:
    """Short per-event summary used in log lines."""
    return {
        event.key: "enabled" if snapshot[event.key].is_available else "disabled"
        for event in TRACKED_EVENTS
    }
