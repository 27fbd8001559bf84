"""Process configuration for calbook.

Values are plain frozen dataclasses so they can be passed explicitly into
builders, calendars and registries. ``get_settings()`` reads optional
environment overrides once per process.
"""

import os
from dataclasses import dataclass, field
from datetime import date, datetime, time
from functools import lru_cache

from calbook.errors import InvalidOperationError


@dataclass(frozen=True)
class WorkingHours:
    """Bounds used for all-day events.

    Attributes:
        start: Time an all-day event begins
        end: Time an all-day event ends (same calendar date)
    """

    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidOperationError(
                f"Working hours start ({self.start}) must be before end ({self.end})"
            )

    def day_start(self, day: date) -> datetime:
        return datetime.combine(day, self.start)

    def day_end(self, day: date) -> datetime:
        return datetime.combine(day, self.end)


DEFAULT_WORKING_HOURS = WorkingHours(start=time(8, 0), end=time(17, 0))
DEFAULT_ZONE = "America/New_York"


@dataclass(frozen=True)
class Settings:
    working_hours: WorkingHours = field(default=DEFAULT_WORKING_HOURS)
    default_zone: str = DEFAULT_ZONE
    log_level: str = "INFO"


def _parse_clock(value: str, variable: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError as exc:
        raise InvalidOperationError(
            f"{variable} must be a time of day like 08:00, got {value!r}"
        ) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment, falling back to defaults."""
    day_start = os.getenv("CALBOOK_DAY_START")
    day_end = os.getenv("CALBOOK_DAY_END")

    working_hours = DEFAULT_WORKING_HOURS
    if day_start or day_end:
        working_hours = WorkingHours(
            start=(
                _parse_clock(day_start, "CALBOOK_DAY_START")
                if day_start
                else DEFAULT_WORKING_HOURS.start
            ),
            end=(
                _parse_clock(day_end, "CALBOOK_DAY_END")
                if day_end
                else DEFAULT_WORKING_HOURS.end
            ),
        )

    return Settings(
        working_hours=working_hours,
        default_zone=os.getenv("CALBOOK_DEFAULT_ZONE", DEFAULT_ZONE),
        log_level=os.getenv("CALBOOK_LOG_LEVEL", "INFO"),
    )


__all__ = [
    "DEFAULT_WORKING_HOURS",
    "DEFAULT_ZONE",
    "Settings",
    "WorkingHours",
    "get_settings",
]
