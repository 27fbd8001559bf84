"""Fluent builder for Event values."""

from datetime import date, datetime

from calbook.config import DEFAULT_WORKING_HOURS, WorkingHours
from calbook.errors import InvalidOperationError
from calbook.event import Event


class EventBuilder:
    """Accumulate event fields and produce a validated Event.

    When no end is set, ``build()`` ends the event at the working-hours end
    on the start's date.

    Example:
        >>> event = (
        ...     EventBuilder()
        ...     .subject("Standup")
        ...     .start(datetime(2025, 11, 10, 9, 0))
        ...     .end(datetime(2025, 11, 10, 9, 15))
        ...     .build()
        ... )
    """

    def __init__(self, working_hours: WorkingHours = DEFAULT_WORKING_HOURS) -> None:
        self.working_hours: WorkingHours = working_hours
        self._subject: str | None = None
        self._start: datetime | None = None
        self._end: datetime | None = None
        self._description: str | None = None
        self._location: str | None = None
        self._is_public: bool = True
        self._series_id: str | None = None

    @classmethod
    def from_event(
        cls, event: Event, working_hours: WorkingHours = DEFAULT_WORKING_HOURS
    ) -> "EventBuilder":
        """Create a builder pre-populated with every field of ``event``."""
        return (
            cls(working_hours)
            .subject(event.subject)
            .start(event.start)
            .end(event.end)
            .description(event.description)
            .location(event.location)
            .is_public(event.is_public)
            .series_id(event.series_id)
        )

    def subject(self, subject: str | None) -> "EventBuilder":
        self._subject = subject
        return self

    def start(self, start: datetime | None) -> "EventBuilder":
        self._start = start
        return self

    def end(self, end: datetime | None) -> "EventBuilder":
        self._end = end
        return self

    def description(self, description: str | None) -> "EventBuilder":
        # Empty text means "no description"
        self._description = description or None
        return self

    def location(self, location: str | None) -> "EventBuilder":
        self._location = location or None
        return self

    def is_public(self, is_public: bool) -> "EventBuilder":
        self._is_public = is_public
        return self

    def series_id(self, series_id: str | None) -> "EventBuilder":
        self._series_id = series_id
        return self

    def all_day(self, day: date) -> "EventBuilder":
        """Span the working hours of ``day``."""
        self._start = self.working_hours.day_start(day)
        self._end = self.working_hours.day_end(day)
        return self

    def build(self) -> Event:
        if self._subject is None or not self._subject.strip():
            raise InvalidOperationError("Subject required")
        if self._start is None:
            raise InvalidOperationError("Start date/time required")

        end = self._end
        if end is None:
            end = self.working_hours.day_end(self._start.date())
        if end < self._start:
            raise InvalidOperationError(
                f"End date/time ({end.isoformat()}) is before start "
                f"({self._start.isoformat()})"
            )

        return Event(
            subject=self._subject,
            start=self._start,
            end=end,
            description=self._description,
            location=self._location,
            is_public=self._is_public,
            series_id=self._series_id,
        )


__all__ = ["EventBuilder"]
