from .builder import EventBuilder
from .calendar import Calendar, EditScope
from .config import DEFAULT_WORKING_HOURS, Settings, WorkingHours, get_settings
from .errors import InvalidOperationError
from .event import Event
from .export import export
from .logging import configure_logging
from .properties import EventProperty
from .recurrence import Day, WeeklyRecurrence
from .registry import CalendarRegistry, WriteResult
from .series import SeriesIndex

__all__ = [
    "Event",
    "EventBuilder",
    "EventProperty",
    "Calendar",
    "CalendarRegistry",
    "EditScope",
    "SeriesIndex",
    "WeeklyRecurrence",
    "WriteResult",
    "Day",
    "InvalidOperationError",
    "WorkingHours",
    "Settings",
    "DEFAULT_WORKING_HOURS",
    "get_settings",
    "export",
    "configure_logging",
]
