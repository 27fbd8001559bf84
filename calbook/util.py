"""Time and zone helpers shared across calbook.

Stored datetimes are naive local values; a calendar's zone gives them an
absolute meaning. The helpers here attach, convert and strip zones.
"""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calbook.errors import InvalidOperationError


def resolve_zone(zone: str | ZoneInfo) -> ZoneInfo:
    """Return a ZoneInfo for an IANA name or pass a ZoneInfo through."""
    if isinstance(zone, ZoneInfo):
        return zone
    if not zone or not str(zone).strip():
        raise InvalidOperationError("Time zone is required")
    try:
        return ZoneInfo(str(zone).strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidOperationError(f"Unknown time zone: {zone!r}") from exc


def project(local: datetime, source: ZoneInfo, target: ZoneInfo) -> datetime:
    """Wall-clock time in ``target`` for the instant ``local`` names in ``source``."""
    return local.replace(tzinfo=source).astimezone(target).replace(tzinfo=None)


def parse_datetime(value: Any) -> datetime:
    """Coerce an ISO-8601 string (``YYYY-MM-DDTHH:MM``) or datetime to a naive datetime.

    Raises:
        InvalidOperationError: If the value is missing, unparseable or
            timezone-aware
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidOperationError(
                f"Invalid date/time {value!r}, expected YYYY-MM-DDTHH:MM"
            ) from exc
    else:
        raise InvalidOperationError(f"Unsupported date/time value: {value!r}")

    if dt.tzinfo is not None:
        raise InvalidOperationError(
            f"Expected a local date/time without zone, got {dt.isoformat()}\n"
            f"Hint: calendar times are wall-clock values in the calendar's zone"
        )
    return dt


__all__ = ["parse_datetime", "project", "resolve_zone"]
