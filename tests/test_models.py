"""Tests for the models module."""
import dataclasses

import pytest

from conftest import make_snapshot
from kairat_notify.models import (
    TRACKED_EVENTS,
    AppConfig,
    AvailabilityStatus,
    NotificationConfig,
    RunState,
    ScheduleConfig,
    ScraperConfig,
    Snapshot,
    describe,
)


def test_tracked_events():
    """Exactly the two fixed matches are tracked."""
    assert [event.key for event in TRACKED_EVENTS] == ["aktobe", "realMadrid"]
    assert [event.opponent for event in TRACKED_EVENTS] == ["Актобе", "Реал Мадрид"]


def test_availability_status_is_immutable():
    """AvailabilityStatus cannot be changed after construction."""
    status = AvailabilityStatus(is_available=True, link="https://x/a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        status.is_available = False


def test_snapshot_requires_both_events():
    """A snapshot with a missing entity is rejected."""
    with pytest.raises(ValueError):
        Snapshot({"aktobe": AvailabilityStatus(False)})


def test_snapshot_rejects_unknown_keys():
    """A snapshot with an extra entity is rejected."""
    with pytest.raises(ValueError):
        Snapshot({
            "aktobe": AvailabilityStatus(False),
            "realMadrid": AvailabilityStatus(False),
            "astana": AvailabilityStatus(True),
        })


def test_snapshot_mapping_and_equality():
    """Snapshots behave as read-only mappings compared by value."""
    first = make_snapshot(aktobe=(True, "https://x/a"))
    second = make_snapshot(aktobe=(True, "https://x/a"))

    assert first == second
    assert hash(first) == hash(second)
    assert set(first) == {"aktobe", "realMadrid"}
    assert first["aktobe"].link == "https://x/a"
    assert describe(first) == {"aktobe": "enabled", "realMadrid": "disabled"}


def test_run_state_defaults():
    """A fresh run state has no baseline and no check in progress."""
    state = RunState()
    assert state.previous_snapshot is None
    assert state.is_checking is False


def test_schedule_config_seconds():
    """Intervals convert to seconds."""
    schedule = ScheduleConfig(check_interval=2, operational_interval=3)
    assert schedule.check_interval_seconds == 120
    assert schedule.operational_interval_seconds == 10800


def test_app_config_defaults():
    """Test AppConfig default values."""
    config = AppConfig()

    assert config.log_level == "INFO"
    assert isinstance(config.scraper, ScraperConfig)
    assert isinstance(config.notification, NotificationConfig)
    assert config.scraper.page_url == "https://fckairat.com/match"
    assert config.scraper.timeout == 10.0
    assert config.scraper.retry_delay == 2.0
    assert "Mozilla/5.0" in config.scraper.user_agent
    assert config.notification.api_base == "https://api.telegram.org"
