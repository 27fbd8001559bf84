"""Weekly recurrence for event series.

Candidate occurrences are produced by python-dateutil's rrule: one per
calendar day from the template's start date, kept when the weekday is in the
requested set. Every candidate keeps the template's time of day and duration.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal, TypeAlias

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, rrule, weekday

from calbook.errors import InvalidOperationError

Day: TypeAlias = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]

# Mapping from day names to dateutil weekday constants
_DAY_MAP: dict[Day, weekday] = {
    "monday": MO,
    "tuesday": TU,
    "wednesday": WE,
    "thursday": TH,
    "friday": FR,
    "saturday": SA,
    "sunday": SU,
}


def to_weekdays(days: Day | Iterable[Day] | None) -> list[weekday]:
    """Convert day names to dateutil weekdays.

    Raises:
        InvalidOperationError: If the set is empty or holds an unknown name
    """
    if days is None:
        raise InvalidOperationError("Weekdays set must not be empty")
    names = [days] if isinstance(days, str) else list(days)
    if not names:
        raise InvalidOperationError("Weekdays set must not be empty")

    weekdays: list[weekday] = []
    for d in names:
        d_lower = str(d).lower()
        if d_lower not in _DAY_MAP:
            valid = ", ".join(_DAY_MAP.keys())
            raise InvalidOperationError(
                f"Invalid day name: '{d}'\nValid days: {valid}"
            )
        wd = _DAY_MAP[d_lower]  # type: ignore[index]
        if wd not in weekdays:
            weekdays.append(wd)
    return weekdays


@dataclass(frozen=True)
class WeeklyRecurrence:
    """A single-day template repeated on a set of weekdays.

    Attributes:
        start: Start of the first candidate day's occurrence
        end: End of that occurrence (same calendar date as start)
        days: Weekdays on which occurrences are kept
        until: Last calendar date (inclusive) to consider, None for unbounded
    """

    start: datetime
    end: datetime
    days: tuple[weekday, ...]
    until: date | None = None

    @classmethod
    def weekly(
        cls,
        start: datetime,
        end: datetime,
        days: Day | Iterable[Day] | None,
        until: date | None = None,
    ) -> "WeeklyRecurrence":
        if start.date() != end.date():
            raise InvalidOperationError(
                f"Event series instances must be single-day, got "
                f"{start.isoformat()} to {end.isoformat()}"
            )
        if end < start:
            raise InvalidOperationError(
                f"End date/time ({end.isoformat()}) is before start "
                f"({start.isoformat()})"
            )
        return cls(start=start, end=end, days=tuple(to_weekdays(days)), until=until)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def candidates(self) -> Iterator[tuple[datetime, datetime]]:
        """Yield (start, end) for every kept day, in ascending order.

        Unbounded when ``until`` is None; callers stop iterating once they
        have what they need.
        """
        until = None
        if self.until is not None:
            if self.until < self.start.date():
                return
            until = datetime.combine(self.until, time.max)

        rules = rrule(
            DAILY, dtstart=self.start, byweekday=self.days, until=until
        )
        for occurrence in rules:
            yield occurrence, occurrence + self.duration


__all__ = ["Day", "WeeklyRecurrence", "to_weekdays"]
