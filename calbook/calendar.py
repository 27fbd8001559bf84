"""In-memory calendar engine.

A Calendar owns the events of one name/zone pair. Events are kept in a list
sorted by (start, end, subject) so lookups and range scans can use binary
search, and a SeriesIndex tracks which starts belong to which series. Every
mutation goes through ``_insert``/``_replace`` so the two stay in step.
"""

import bisect
import logging
import uuid
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Literal
from zoneinfo import ZoneInfo

from calbook.builder import EventBuilder
from calbook.config import DEFAULT_WORKING_HOURS, WorkingHours
from calbook.errors import InvalidOperationError
from calbook.event import Event, event_order
from calbook.properties import EventProperty
from calbook.recurrence import Day, WeeklyRecurrence
from calbook.series import SeriesIndex
from calbook.util import parse_datetime, project, resolve_zone

logger = logging.getLogger(__name__)


class EditScope(Enum):
    """How far an edit reaches from the occurrence it names."""

    SINGLE = "single"
    FROM_DATE = "from_date"
    SERIES = "series"

    @classmethod
    def from_token(cls, token: "str | EditScope") -> "EditScope":
        """Case-insensitive lookup of a scope token such as ``"series"``."""
        if isinstance(token, EditScope):
            return token
        try:
            return cls(str(token).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise InvalidOperationError(
                f"Unknown edit scope: '{token}'\nValid scopes: {valid}"
            ) from None



def _new_series_id() -> str:
    return f"SERIES_{uuid.uuid4()}"


def _time_of_day(value: Any) -> time:
    if isinstance(value, time):
        return value
    return parse_datetime(value).time()


class Calendar:
    """A named calendar of events in one time zone.

    All stored datetimes are naive wall-clock values in ``zone``.

    Attributes:
        working_hours: Bounds used when an event is created without an end
    """

    def __init__(
        self,
        name: str,
        zone: str | ZoneInfo,
        *,
        working_hours: WorkingHours = DEFAULT_WORKING_HOURS,
    ) -> None:
        if not name or not name.strip():
            raise InvalidOperationError("Calendar name cannot be blank")
        self._name: str = name
        self._zone: ZoneInfo = resolve_zone(zone)
        self.working_hours: WorkingHours = working_hours
        self._events: list[Event] = []
        self._series: SeriesIndex = SeriesIndex()

    def __repr__(self) -> str:
        return f"Calendar({self._name!r}, {self.zone_id!r}, {len(self._events)} events)"

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __getitem__(self, item: slice) -> list[Event]:
        """Range query by slice: ``cal[start:end]``.

        Bounds may be datetimes, dates (whole days) or None (unbounded).
        """
        start = self._coerce_bound(item.start, "start")
        end = self._coerce_bound(item.stop, "end")
        return self.get_events_in_range(start, end)

    def _coerce_bound(self, bound: Any, edge: Literal["start", "end"]) -> datetime:
        if bound is None:
            return datetime.min if edge == "start" else datetime.max
        if isinstance(bound, datetime):
            return parse_datetime(bound)
        if isinstance(bound, date):
            return datetime.combine(bound, time.min if edge == "start" else time.max)
        raise TypeError(
            f"Calendar slice {edge} bound must be datetime, date, or None.\n"
            f"Got {type(bound).__name__!r}: {bound!r}\n"
            f"Examples:\n"
            f"  cal[datetime(2025, 11, 10, 9):datetime(2025, 11, 10, 17)]\n"
            f"  cal[date(2025, 11, 10):date(2025, 11, 16)]  # whole days"
        )

    # -- identity -----------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    def rename(self, new_name: str) -> None:
        if not new_name or not new_name.strip():
            raise InvalidOperationError("Calendar name cannot be blank")
        self._name = new_name

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    @property
    def zone_id(self) -> str:
        return self._zone.key

    def set_zone(self, zone: str | ZoneInfo) -> None:
        """Move the calendar to another zone, keeping every event's instant.

        Each event's wall-clock start and end are re-projected into the new
        zone, then the list is re-sorted and the series index rebuilt. Series
        identifiers are unchanged.
        """
        new_zone = resolve_zone(zone)
        if new_zone.key == self._zone.key:
            return

        old_zone = self._zone
        converted = [
            EventBuilder.from_event(e, self.working_hours)
            .start(project(e.start, old_zone, new_zone))
            .end(project(e.end, old_zone, new_zone))
            .build()
            for e in self._events
        ]
        converted.sort(key=event_order)
        for before, after in zip(converted, converted[1:]):
            if before == after:
                raise InvalidOperationError(
                    f"Moving calendar {self._name!r} to {new_zone.key} would merge "
                    f"two events into {after}"
                )

        self._events = converted
        self._zone = new_zone
        self._series.rebuild(self._events)
        logger.info(
            "Calendar %r moved from %s to %s (%d events)",
            self._name,
            old_zone.key,
            new_zone.key,
            len(self._events),
        )

    # -- storage ------------------------------------------------------------

    def _insert(self, event: Event) -> None:
        bisect.insort(self._events, event, key=event_order)
        if event.series_id is not None:
            self._series.add(event.series_id, event.start)

    def _first_index_at(self, start: datetime) -> int:
        return bisect.bisect_left(self._events, start, key=lambda e: e.start)

    def _exists(self, subject: str, start: datetime, end: datetime) -> bool:
        return bool(self.find_events(subject, start, end))

    def _replace(self, old: Event, new: Event) -> None:
        """Swap ``old`` for ``new`` in storage and keep the series index in step."""
        self._events.remove(old)
        bisect.insort(self._events, new, key=event_order)

        if old.series_id == new.series_id:
            if old.series_id is not None:
                self._series.replace_start(old.series_id, old.start, new.start)
        else:
            if old.series_id is not None:
                self._series.remove(old.series_id, old.start)
            if new.series_id is not None:
                self._series.add(new.series_id, new.start)
        logger.debug("Replaced %s with %s", old, new)

    def _ensure_not_duplicate(self, old: Event, new: Event) -> None:
        if new != old and self._exists(new.subject, new.start, new.end):
            raise InvalidOperationError(
                f"Edit would create duplicate event: {new}"
            )

    # -- creation -----------------------------------------------------------

    def create_event(
        self, subject: str, start: datetime, end: datetime | None = None
    ) -> Event:
        """Create a single event.

        Without ``end`` the event becomes all-day: it spans the working hours
        of the start's date.

        Raises:
            InvalidOperationError: If the fields are invalid or an event with
                the same subject, start and end already exists
        """
        builder = EventBuilder(self.working_hours).subject(subject)
        if start is None:
            raise InvalidOperationError("Start date/time required")
        if end is None:
            builder.all_day(start.date())
        else:
            builder.start(start).end(end)
        event = builder.build()

        if self._exists(event.subject, event.start, event.end):
            raise InvalidOperationError(
                "Event with same subject, start, and end already exists"
            )
        self._insert(event)
        logger.debug("Calendar %r created %s", self._name, event)
        return event

    def create_event_series(
        self,
        subject: str,
        start: datetime,
        end: datetime | None,
        days: Day | Iterable[Day],
        occurrences: int,
    ) -> list[Event]:
        """Create ``occurrences`` events on the given weekdays, starting at ``start``'s date.

        Candidates that collide with an existing event are skipped and do
        not count towards ``occurrences``.
        """
        if occurrences <= 0:
            raise InvalidOperationError(
                f"Occurrences must be positive, got {occurrences}"
            )
        rule = self._weekly_rule(start, end, days)
        return self._create_series(subject, rule, occurrences)

    def create_event_series_until(
        self,
        subject: str,
        start: datetime,
        end: datetime | None,
        days: Day | Iterable[Day],
        until: date,
    ) -> list[Event]:
        """Create events on the given weekdays from ``start``'s date through ``until`` (inclusive)."""
        if until is None:
            raise InvalidOperationError("Series end date required")
        rule = self._weekly_rule(start, end, days, until)
        return self._create_series(subject, rule, None)

    def _weekly_rule(
        self,
        start: datetime,
        end: datetime | None,
        days: Day | Iterable[Day],
        until: date | None = None,
    ) -> WeeklyRecurrence:
        if start is None:
            raise InvalidOperationError("Start date/time required")
        if end is None:
            start = self.working_hours.day_start(start.date())
            end = self.working_hours.day_end(start.date())
        return WeeklyRecurrence.weekly(start, end, days, until)

    def _create_series(
        self, subject: str, rule: WeeklyRecurrence, limit: int | None
    ) -> list[Event]:
        series_id = _new_series_id()
        created: list[Event] = []

        for occ_start, occ_end in rule.candidates():
            if self._exists(subject, occ_start, occ_end):
                logger.debug(
                    "Skipping series occurrence of %r at %s: already exists",
                    subject,
                    occ_start,
                )
                continue
            event = (
                EventBuilder(self.working_hours)
                .subject(subject)
                .start(occ_start)
                .end(occ_end)
                .series_id(series_id)
                .build()
            )
            self._insert(event)
            created.append(event)
            if limit is not None and len(created) >= limit:
                break

        logger.debug(
            "Calendar %r created series %s with %d occurrences",
            self._name,
            series_id,
            len(created),
        )
        return created

    # -- queries ------------------------------------------------------------

    def find_events(
        self, subject: str, start: datetime, end: datetime | None = None
    ) -> list[Event]:
        """Events with this subject and exact start (and exact end, if given)."""
        matches: list[Event] = []
        for event in self._events[self._first_index_at(start):]:
            if event.start != start:
                break
            if event.subject == subject and (end is None or event.end == end):
                matches.append(event)
        return matches

    def get_events_on_date(self, day: date) -> list[Event]:
        """Events whose interval touches ``day``."""
        start_of_day = datetime.combine(day, time.min)
        end_of_day = start_of_day + timedelta(days=1)

        # Nothing starting after midnight of the next day can overlap
        stop = bisect.bisect_right(self._events, end_of_day, key=lambda e: e.start)
        return [
            e
            for e in self._events[:stop]
            if e.end >= start_of_day and e.start < end_of_day
        ]

    def get_events_in_range(self, start: datetime, end: datetime) -> list[Event]:
        """Events overlapping [start, end], both ends inclusive."""
        stop = bisect.bisect_right(self._events, end, key=lambda e: e.start)
        return [e for e in self._events[:stop] if e.end >= start]

    def is_busy_at(self, moment: datetime) -> bool:
        """True if some event covers ``moment`` (start inclusive, end exclusive)."""
        stop = bisect.bisect_right(self._events, moment, key=lambda e: e.start)
        return any(e.end > moment for e in self._events[:stop])

    def get_all_events(self) -> list[Event]:
        return list(self._events)

    def series_starts(self, series_id: str) -> list[datetime]:
        return self._series.starts(series_id)

    def get_series(self, series_id: str) -> list[Event]:
        """Occurrences of a series in start order, resolved through the series index."""
        result: list[Event] = []
        for start in self._series.starts(series_id):
            for event in self._events[self._first_index_at(start):]:
                if event.start != start:
                    break
                if event.series_id == series_id:
                    result.append(event)
                    break
        return result

    # -- edits --------------------------------------------------------------

    def _locate(self, subject: str, start: datetime) -> Event:
        matches = self.find_events(subject, start)
        if not matches:
            raise InvalidOperationError(
                f"No event found with subject {subject!r} starting at "
                f"{start.isoformat()}"
            )
        if len(matches) > 1:
            raise InvalidOperationError(
                f"Multiple events match subject {subject!r} starting at "
                f"{start.isoformat()}"
            )
        return matches[0]

    def _apply(self, event: Event, prop: EventProperty, value: Any) -> Event:
        builder = EventBuilder.from_event(event, self.working_hours)
        return prop.apply(builder, value).build()

    def _edit_one(self, event: Event, updated: Event) -> Event:
        self._ensure_not_duplicate(event, updated)
        self._replace(event, updated)
        return updated

    def _shift_time_of_day(
        self, event: Event, new_time: time, series_id: str | None
    ) -> Event:
        new_start = datetime.combine(event.start.date(), new_time)
        return (
            EventBuilder.from_event(event, self.working_hours)
            .start(new_start)
            .end(new_start + event.duration)
            .series_id(series_id)
            .build()
        )

    def edit_event(
        self, subject: str, start: datetime, prop: EventProperty | str, value: Any
    ) -> Event:
        """Edit exactly one occurrence and return its new value."""
        target = self._locate(subject, start)
        prop = EventProperty.from_token(prop)
        return self._edit_one(target, self._apply(target, prop, value))

    def edit_events_from(
        self, subject: str, start: datetime, prop: EventProperty | str, value: Any
    ) -> list[Event]:
        """Edit an occurrence and every later occurrence of its series.

        A START edit moves each selected occurrence to the new time of day on
        its own date and detaches the selection into a new series; earlier
        occurrences keep the original identifier. Other properties are
        applied as-is without touching identifiers.
        """
        pivot = self._locate(subject, start)
        prop = EventProperty.from_token(prop)
        if pivot.series_id is None:
            return [self._edit_one(pivot, self._apply(pivot, prop, value))]

        selected = [e for e in self.get_series(pivot.series_id) if e.start >= pivot.start]

        edited: list[Event] = []
        if prop is EventProperty.START:
            new_time = _time_of_day(value)
            new_series_id = _new_series_id()
            for event in selected:
                updated = self._shift_time_of_day(event, new_time, new_series_id)
                edited.append(self._edit_one(event, updated))
            logger.debug(
                "Split series %s at %s into %s (%d occurrences)",
                pivot.series_id,
                pivot.start,
                new_series_id,
                len(edited),
            )
            return edited

        for event in selected:
            edited.append(self._edit_one(event, self._apply(event, prop, value)))
        return edited

    def edit_series(
        self, subject: str, start: datetime, prop: EventProperty | str, value: Any
    ) -> list[Event]:
        """Edit every occurrence of the series containing the named occurrence."""
        pivot = self._locate(subject, start)
        prop = EventProperty.from_token(prop)
        if pivot.series_id is None:
            return [self._edit_one(pivot, self._apply(pivot, prop, value))]

        members = self.get_series(pivot.series_id)
        edited: list[Event] = []
        if prop is EventProperty.START:
            new_time = _time_of_day(value)
            for event in members:
                updated = self._shift_time_of_day(event, new_time, event.series_id)
                edited.append(self._edit_one(event, updated))
            return edited

        for event in members:
            edited.append(self._edit_one(event, self._apply(event, prop, value)))
        return edited

    def edit(
        self,
        scope: EditScope | str,
        subject: str,
        start: datetime,
        prop: EventProperty | str,
        value: Any,
    ) -> list[Event]:
        """Dispatch an edit by scope; always returns the edited events."""
        scope = EditScope.from_token(scope)
        if scope is EditScope.SINGLE:
            return [self.edit_event(subject, start, prop, value)]
        if scope is EditScope.FROM_DATE:
            return self.edit_events_from(subject, start, prop, value)
        return self.edit_series(subject, start, prop, value)

    # -- copy ---------------------------------------------------------------

    def copy_from(self, template: Event, new_start: datetime, new_end: datetime) -> Event:
        """Accept a copy of ``template`` moved to [new_start, new_end].

        Every other field is carried over, including the series identifier,
        so a copied series keeps its membership in this calendar.
        """
        copied = (
            EventBuilder.from_event(template, self.working_hours)
            .start(new_start)
            .end(new_end)
            .build()
        )
        if self._exists(copied.subject, copied.start, copied.end):
            raise InvalidOperationError(
                f"Duplicate event in destination calendar {self._name!r}: {copied}"
            )
        self._insert(copied)
        logger.debug("Calendar %r accepted copy %s", self._name, copied)
        return copied


__all__ = ["Calendar", "EditScope"]
