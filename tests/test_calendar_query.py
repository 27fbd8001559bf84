"""Tests for Calendar queries."""

from datetime import date, datetime

import pytest


@pytest.fixture
def week(calendar):
    calendar.create_event("Early", datetime(2025, 11, 10, 7), datetime(2025, 11, 10, 8))
    calendar.create_event("Review", datetime(2025, 11, 10, 14), datetime(2025, 11, 10, 15))
    calendar.create_event("Review", datetime(2025, 11, 10, 14), datetime(2025, 11, 10, 16))
    calendar.create_event("Overnight", datetime(2025, 11, 11, 22), datetime(2025, 11, 12, 2))
    calendar.create_event("Offsite", datetime(2025, 11, 14))
    return calendar


def test_find_events_by_subject_and_start(week):
    """Exact start and subject match; end is optional."""
    found = week.find_events("Review", datetime(2025, 11, 10, 14))

    assert len(found) == 2
    assert {e.end for e in found} == {datetime(2025, 11, 10, 15), datetime(2025, 11, 10, 16)}


def test_find_events_with_end(week):
    """An end narrows the match."""
    found = week.find_events("Review", datetime(2025, 11, 10, 14), datetime(2025, 11, 10, 16))

    assert [e.end for e in found] == [datetime(2025, 11, 10, 16)]


def test_find_events_no_match(week):
    """Subject and start must both match."""
    assert week.find_events("Review", datetime(2025, 11, 10, 13)) == []
    assert week.find_events("Lunch", datetime(2025, 11, 10, 14)) == []


def test_events_on_date(week):
    """Events touching the day are returned in order."""
    assert [e.subject for e in week.get_events_on_date(date(2025, 11, 10))] == [
        "Early",
        "Review",
        "Review",
    ]


def test_events_on_date_includes_overnight(week):
    """Events spilling across midnight appear on both days."""
    assert [e.subject for e in week.get_events_on_date(date(2025, 11, 11))] == ["Overnight"]
    assert [e.subject for e in week.get_events_on_date(date(2025, 11, 12))] == ["Overnight"]


def test_events_on_empty_date(week):
    """Days with nothing scheduled are empty."""
    assert week.get_events_on_date(date(2025, 11, 13)) == []


def test_events_in_range_inclusive(week):
    """Range overlap is inclusive at both ends."""
    found = week.get_events_in_range(datetime(2025, 11, 10, 8), datetime(2025, 11, 10, 14))

    # Early ends exactly at 08:00, Reviews start exactly at 14:00
    assert [e.subject for e in found] == ["Early", "Review", "Review"]


def test_events_in_range_excludes_outside(week):
    """Events entirely before or after the range are left out."""
    found = week.get_events_in_range(datetime(2025, 11, 12, 3), datetime(2025, 11, 13, 23))

    assert found == []


def test_slice_by_dates(week):
    """Slicing with dates covers whole days."""
    found = week[date(2025, 11, 11):date(2025, 11, 14)]

    assert [e.subject for e in found] == ["Overnight", "Offsite"]


def test_unbounded_slice(week):
    """Open slices return everything."""
    assert week[:] == week.get_all_events()


def test_slice_rejects_other_types(week):
    """Only datetimes, dates and None are valid bounds."""
    with pytest.raises(TypeError, match="bound must be"):
        week[0:100]


@pytest.mark.parametrize(
    "moment,busy",
    [
        (datetime(2025, 11, 17, 9, 30), True),
        (datetime(2025, 11, 17, 9, 0), True),
        (datetime(2025, 11, 17, 10, 0), False),
        (datetime(2025, 11, 17, 8, 59), False),
    ],
)
def test_is_busy_at(calendar, moment, busy):
    """Busy is start-inclusive and end-exclusive."""
    calendar.create_event("Focus", datetime(2025, 11, 17, 9), datetime(2025, 11, 17, 10))

    assert calendar.is_busy_at(moment) is busy


def test_is_busy_with_long_earlier_event(calendar):
    """A long event that started earlier still counts."""
    calendar.create_event("Trip", datetime(2025, 11, 10, 6), datetime(2025, 11, 14, 20))
    calendar.create_event("Call", datetime(2025, 11, 12, 9), datetime(2025, 11, 12, 10))

    assert calendar.is_busy_at(datetime(2025, 11, 13, 12))


def test_get_all_events_is_a_copy(week):
    """The returned list is detached from storage."""
    events = week.get_all_events()
    events.clear()

    assert len(week) == 5
