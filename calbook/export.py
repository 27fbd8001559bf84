"""Calendar export to CSV and iCalendar files.

The format is picked from the destination's extension: ``.csv`` writes a
Google-Calendar-compatible CSV, ``.ics``/``.ical`` write RFC 5545 via the
icalendar library (which handles escaping and 75-octet line folding).
"""

import csv
import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent

from calbook.calendar import Calendar
from calbook.errors import InvalidOperationError
from calbook.event import Event

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "All Day Event",
    "Description",
    "Location",
    "Private",
]

_CSV_DATE = "%m/%d/%Y"
_CSV_TIME = "%I:%M %p"
_PRODID = "-//calbook//EN"
_UID_DOMAIN = "calbook"


def export(calendar: Calendar, path: str | Path) -> Path:
    """Write ``calendar`` to ``path`` in the format its extension names.

    Returns:
        Absolute path of the written file

    Raises:
        InvalidOperationError: If the extension is not .csv, .ics or .ical
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return export_csv(calendar, path)
    if suffix in (".ics", ".ical"):
        return export_ical(calendar, path)
    raise InvalidOperationError(
        f"Unsupported export extension {path.suffix!r}. Use .csv, .ics, or .ical"
    )


def csv_row(event: Event, calendar: Calendar) -> list[str]:
    all_day = event.is_all_day(calendar.working_hours)
    return [
        event.subject,
        event.start.strftime(_CSV_DATE),
        "" if all_day else event.start.strftime(_CSV_TIME),
        event.end.strftime(_CSV_DATE),
        "" if all_day else event.end.strftime(_CSV_TIME),
        "True" if all_day else "False",
        event.description or "",
        event.location or "",
        "False" if event.is_public else "True",
    ]


def export_csv(calendar: Calendar, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADER)
        for event in calendar.get_all_events():
            writer.writerow(csv_row(event, calendar))

    logger.info("Exported %d event(s) from %r to %s", len(calendar), calendar.name, path)
    return path.resolve()


def event_uid(event: Event, calendar: Calendar) -> str:
    """Stable identifier derived from calendar name, subject, start and end."""
    seed = (
        f"{calendar.name}|{event.subject}|{event.start.isoformat()}|"
        f"{event.end.isoformat()}"
    )
    return f"{uuid.uuid5(uuid.NAMESPACE_URL, seed)}@{_UID_DOMAIN}"


def _to_utc(local: datetime, calendar: Calendar) -> datetime:
    return local.replace(tzinfo=calendar.zone).astimezone(timezone.utc)


def to_ical(calendar: Calendar, stamp: datetime | None = None) -> bytes:
    """Render ``calendar`` as iCalendar bytes.

    Timed events use UTC date-times; all-day events use DATE values with an
    exclusive end on the following day.
    """
    stamp = stamp or datetime.now(timezone.utc)

    cal = iCalendar()
    cal.add("prodid", _PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")

    for event in calendar.get_all_events():
        ievent = iEvent()
        ievent.add("uid", event_uid(event, calendar))
        ievent.add("dtstamp", stamp)

        if event.is_all_day(calendar.working_hours):
            ievent.add("dtstart", event.start.date())
            ievent.add("dtend", event.end.date() + timedelta(days=1))
        else:
            ievent.add("dtstart", _to_utc(event.start, calendar))
            ievent.add("dtend", _to_utc(event.end, calendar))

        ievent.add("summary", event.subject)
        ievent.add("class", "PUBLIC" if event.is_public else "PRIVATE")
        if event.description:
            ievent.add("description", event.description)
        if event.location:
            ievent.add("location", event.location)
        cal.add_component(ievent)

    return cal.to_ical()


def export_ical(calendar: Calendar, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(to_ical(calendar))

    logger.info("Exported %d event(s) from %r to %s", len(calendar), calendar.name, path)
    return path.resolve()


__all__ = ["CSV_HEADER", "export", "export_csv", "export_ical", "event_uid", "to_ical"]
