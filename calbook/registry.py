"""Named calendars and cross-calendar copying.

The registry owns every Calendar by unique name. Copy operations only talk
to calendars through their public methods: they look events up in the
source, project start times into the target zone, and hand the result to
``Calendar.copy_from``.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from calbook.calendar import Calendar
from calbook.config import WorkingHours, get_settings
from calbook.errors import InvalidOperationError
from calbook.event import Event
from calbook.util import project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of copying one source event.

    Attributes:
        success: True if the event was written to the target
        source: The event that was considered for copying
        event: The written event if successful, None if skipped
        error: Why the event was skipped, None if successful
    """

    success: bool
    source: Event
    event: Event | None
    error: Exception | None


class CalendarRegistry:
    """Owns named calendars and copies events between them.

    Example:
        >>> registry = CalendarRegistry()
        >>> work = registry.create_calendar("Work", "America/New_York")
        >>> home = registry.create_calendar("Home", "Europe/London")
        >>> work.create_event("Review", datetime(2025, 11, 10, 14), datetime(2025, 11, 10, 15))
        >>> registry.copy_event("Work", "Home", "Review",
        ...                     datetime(2025, 11, 10, 14), datetime(2025, 11, 11, 9))
    """

    def __init__(self, *, working_hours: WorkingHours | None = None) -> None:
        if working_hours is None:
            working_hours = get_settings().working_hours
        self.working_hours: WorkingHours = working_hours
        self._calendars: dict[str, Calendar] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._calendars

    def __len__(self) -> int:
        return len(self._calendars)

    # -- calendar management ------------------------------------------------

    def create_calendar(self, name: str, zone: str | ZoneInfo | None = None) -> Calendar:
        """Create and register a calendar; ``zone`` defaults to the configured zone."""
        if name in self._calendars:
            raise InvalidOperationError(f"Calendar already exists: {name}")
        if zone is None:
            zone = get_settings().default_zone
        calendar = Calendar(name, zone, working_hours=self.working_hours)
        self._calendars[name] = calendar
        logger.info("Created calendar %r in %s", name, calendar.zone_id)
        return calendar

    def rename_calendar(self, old_name: str, new_name: str) -> None:
        """Rebind a calendar under a new name; the old binding survives any failure."""
        calendar = self.get_calendar(old_name)
        if new_name == old_name:
            return
        if new_name in self._calendars:
            raise InvalidOperationError(f"Calendar already exists: {new_name}")

        del self._calendars[old_name]
        try:
            calendar.rename(new_name)
        except InvalidOperationError:
            self._calendars[old_name] = calendar
            raise
        self._calendars[new_name] = calendar
        logger.info("Renamed calendar %r to %r", old_name, new_name)

    def change_timezone(self, name: str, zone: str | ZoneInfo) -> None:
        self.get_calendar(name).set_zone(zone)

    def get_calendar(self, name: str) -> Calendar:
        try:
            return self._calendars[name]
        except KeyError:
            raise InvalidOperationError(f"No such calendar: {name}") from None

    def list_calendar_names(self) -> list[str]:
        return sorted(self._calendars)

    def has_calendar(self, name: str) -> bool:
        return name in self._calendars

    # -- copying ------------------------------------------------------------

    def copy_event(
        self,
        source_name: str,
        target_name: str,
        subject: str,
        source_start: datetime,
        target_start: datetime,
    ) -> Event:
        """Copy one event to ``target_start`` in the target calendar, keeping its duration.

        ``target_start`` is taken as a wall-clock time in the target zone.

        Raises:
            InvalidOperationError: If the source event is missing or
                ambiguous, or the target already holds the same occurrence
        """
        source = self.get_calendar(source_name)
        target = self.get_calendar(target_name)

        matches = source.find_events(subject, source_start)
        if not matches:
            raise InvalidOperationError(
                f"No matching event to copy: {subject!r} at {source_start.isoformat()}"
            )
        if len(matches) > 1:
            raise InvalidOperationError(
                f"Ambiguous event to copy: {subject!r} at {source_start.isoformat()}"
            )

        event = matches[0]
        copied = target.copy_from(event, target_start, target_start + event.duration)
        logger.debug("Copied %s from %r to %r", event, source_name, target_name)
        return copied

    def copy_events_on_date(
        self,
        source_name: str,
        target_name: str,
        source_date: date,
        target_date: date,
    ) -> list[WriteResult]:
        """Copy every event on ``source_date`` onto ``target_date``.

        Each start is projected into the target zone; the projected time of
        day is kept and the date replaced by ``target_date``.
        """
        source = self.get_calendar(source_name)
        target = self.get_calendar(target_name)

        placements = [
            (event, self._place(event, source, target, target_date))
            for event in source.get_events_on_date(source_date)
        ]
        return self._copy_batch(target, placements)

    def copy_events_between(
        self,
        source_name: str,
        target_name: str,
        start_date: date,
        end_date: date,
        target_start: date,
    ) -> list[WriteResult]:
        """Copy every event overlapping [start_date, end_date] to the range anchored at ``target_start``.

        An event ``n`` days after ``start_date`` lands ``n`` days after
        ``target_start``. Series members keep their series identifier, so a
        partially covered series shows up as a shorter part of the same series.
        """
        if end_date < start_date:
            raise InvalidOperationError(
                f"Range end ({end_date}) is before range start ({start_date})"
            )
        source = self.get_calendar(source_name)
        target = self.get_calendar(target_name)

        range_start = datetime.combine(start_date, time.min)
        range_end = datetime.combine(end_date + timedelta(days=1), time.min) - timedelta(
            seconds=1
        )

        placements: list[tuple[Event, datetime]] = []
        for event in source.get_events_in_range(range_start, range_end):
            offset = (event.start.date() - start_date).days
            target_day = target_start + timedelta(days=offset)
            placements.append((event, self._place(event, source, target, target_day)))
        return self._copy_batch(target, placements)

    @staticmethod
    def _place(event: Event, source: Calendar, target: Calendar, day: date) -> datetime:
        local = project(event.start, source.zone, target.zone)
        return datetime.combine(day, local.time())

    def _copy_batch(
        self, target: Calendar, placements: Iterable[tuple[Event, datetime]]
    ) -> list[WriteResult]:
        results: list[WriteResult] = []
        for event, new_start in placements:
            new_end = new_start + event.duration
            reason = self._skip_reason(target, event.subject, new_start, new_end)
            if reason is not None:
                logger.debug("Skipping copy of %s: %s", event, reason)
                results.append(
                    WriteResult(
                        success=False,
                        source=event,
                        event=None,
                        error=InvalidOperationError(reason),
                    )
                )
                continue
            copied = target.copy_from(event, new_start, new_end)
            results.append(WriteResult(success=True, source=event, event=copied, error=None))

        logger.info(
            "Copied %d of %d event(s) to %r",
            sum(1 for r in results if r.success),
            len(results),
            target.name,
        )
        return results

    @staticmethod
    def _skip_reason(
        target: Calendar, subject: str, new_start: datetime, new_end: datetime
    ) -> str | None:
        """Batch copies are stricter than ``copy_from``: one subject per target day."""
        if target.find_events(subject, new_start, new_end) or target.find_events(
            subject, new_start
        ):
            return f"{subject!r} already exists at {new_start.isoformat()}"
        for existing in target.get_events_on_date(new_start.date()):
            if existing.subject == subject:
                return f"{subject!r} already exists on {new_start.date()}"
        return None


__all__ = ["CalendarRegistry", "WriteResult"]
