from datetime import datetime

import pytest

from calbook import Calendar, CalendarRegistry


@pytest.fixture
def calendar() -> Calendar:
    return Calendar("Work", "America/New_York")


@pytest.fixture
def registry() -> CalendarRegistry:
    return CalendarRegistry()


@pytest.fixture
def mwf_series(calendar: Calendar):
    """Five Mon/Wed/Fri 09:00-10:00 occurrences starting Monday 2025-11-10."""
    return calendar.create_event_series(
        "Standup",
        datetime(2025, 11, 10, 9, 0),
        datetime(2025, 11, 10, 10, 0),
        ["monday", "wednesday", "friday"],
        5,
    )
