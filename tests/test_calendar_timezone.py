"""Tests for reassigning a calendar's time zone."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from calbook import Calendar, InvalidOperationError


@pytest.fixture
def london() -> Calendar:
    cal = Calendar("Team", "Europe/London")
    cal.create_event("Review", datetime(2025, 11, 10, 14), datetime(2025, 11, 10, 15))
    return cal


def test_same_zone_is_noop(london):
    """Setting the current zone leaves every event untouched."""
    before = london.get_all_events()

    london.set_zone("Europe/London")

    assert london.get_all_events() == before
    assert london.zone_id == "Europe/London"


def test_zone_change_keeps_instant(london):
    """London 14:00 is New York 09:00 in November."""
    london.set_zone("America/New_York")

    (event,) = london.get_all_events()
    assert event.start == datetime(2025, 11, 10, 9)
    assert event.end == datetime(2025, 11, 10, 10)
    assert london.zone_id == "America/New_York"


def test_zone_change_round_trip(london):
    """Converting back restores the original wall-clock times."""
    original = london.get_all_events()

    london.set_zone(ZoneInfo("Asia/Tokyo"))
    london.set_zone("Europe/London")

    assert london.get_all_events() == original


def test_zone_change_preserves_absolute_instants(calendar, mwf_series):
    """Every event names the same instant before and after."""
    before = [e.start.replace(tzinfo=calendar.zone) for e in calendar.get_all_events()]

    calendar.set_zone("Australia/Sydney")

    after = [e.start.replace(tzinfo=calendar.zone) for e in calendar.get_all_events()]
    assert before == after


def test_zone_change_crosses_midnight_and_rebuilds_index(calendar, mwf_series):
    """Dates may shift; the series index follows, ids do not change."""
    series_id = mwf_series[0].series_id

    calendar.set_zone("Asia/Tokyo")

    events = calendar.get_all_events()
    # 09:00 EST is 23:00 JST the same day
    assert events[0].start == datetime(2025, 11, 10, 23)
    assert events[0].end == datetime(2025, 11, 11, 0)
    assert all(e.series_id == series_id for e in events)
    assert calendar.series_starts(series_id) == [e.start for e in events]
    assert events == sorted(events, key=lambda e: (e.start, e.end, e.subject))


def test_zone_change_keeps_duration(calendar):
    """Durations survive a zone change."""
    calendar.create_event("Block", datetime(2025, 11, 10, 9), datetime(2025, 11, 10, 12, 45))

    calendar.set_zone("Europe/Berlin")

    assert calendar.get_all_events()[0].duration == timedelta(hours=3, minutes=45)


def test_unknown_zone_rejected(london):
    """Invalid zones are rejected and the calendar is unchanged."""
    with pytest.raises(InvalidOperationError, match="Unknown time zone"):
        london.set_zone("Nowhere/Special")

    assert london.zone_id == "Europe/London"


def test_zone_change_into_dst_fold_rejected():
    """Two instants that share a wall-clock time after the move are refused."""
    cal = Calendar("Ops", "UTC")
    # 05:30Z and 06:30Z are both 01:30 in New York on 2025-11-02.
    cal.create_event("Call", datetime(2025, 11, 2, 5, 30), datetime(2025, 11, 2, 5, 45))
    cal.create_event("Call", datetime(2025, 11, 2, 6, 30), datetime(2025, 11, 2, 6, 45))
    before = cal.get_all_events()

    with pytest.raises(InvalidOperationError, match="would merge"):
        cal.set_zone("America/New_York")

    assert cal.zone_id == "UTC"
    assert cal.get_all_events() == before
