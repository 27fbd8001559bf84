"""Event value type and its canonical ordering."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from calbook.config import DEFAULT_WORKING_HOURS, WorkingHours
from calbook.errors import InvalidOperationError


@dataclass(frozen=True, kw_only=True)
class Event:
    """One concrete occurrence in a calendar.

    ``start`` and ``end`` are naive local datetimes, interpreted in the zone of
    the calendar that holds the event. Two events are the same occurrence iff
    subject, start and end are equal; the remaining fields are excluded from
    equality and hashing.

    Attributes:
        subject: Event title (non-blank)
        start: Local start datetime
        end: Local end datetime (>= start)
        description: Free text, None when absent
        location: Free text, None when absent
        is_public: Visibility flag
        series_id: Identifier shared by every occurrence of a series,
            None for standalone events
    """

    subject: str
    start: datetime
    end: datetime
    description: str | None = field(default=None, compare=False)
    location: str | None = field(default=None, compare=False)
    is_public: bool = field(default=True, compare=False)
    series_id: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.subject or not self.subject.strip():
            raise InvalidOperationError("Event subject cannot be blank")
        if self.start is None or self.end is None:
            raise InvalidOperationError("Event start and end are required")
        if self.end < self.start:
            raise InvalidOperationError(
                f"Event end ({self.end.isoformat()}) is before start "
                f"({self.start.isoformat()})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_series_part(self) -> bool:
        return self.series_id is not None

    def is_all_day(self, working_hours: WorkingHours = DEFAULT_WORKING_HOURS) -> bool:
        """True if the event spans exactly the working hours of one date."""
        return (
            self.start.date() == self.end.date()
            and self.start.time() == working_hours.start
            and self.end.time() == working_hours.end
        )

    def __str__(self) -> str:
        where = f" at {self.location}" if self.location else ""
        return (
            f"{self.subject} starting on {self.start.date()} at "
            f"{self.start.time().strftime('%H:%M')}, ending on {self.end.date()} at "
            f"{self.end.time().strftime('%H:%M')}{where}"
        )


def event_order(event: Event) -> tuple[datetime, datetime, str]:
    """Sort key shared by storage and binary search."""
    return (event.start, event.end, event.subject)


__all__ = ["Event", "event_order"]
