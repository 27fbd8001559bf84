"""Editable event properties.

Each property knows how to coerce a raw value (string token, datetime or
bool) and push it into an EventBuilder.
"""

from enum import Enum
from typing import Any

from calbook.builder import EventBuilder
from calbook.errors import InvalidOperationError
from calbook.util import parse_datetime

_VISIBILITY = {
    "public": True,
    "private": False,
}


class EventProperty(Enum):
    SUBJECT = "subject"
    START = "start"
    END = "end"
    DESCRIPTION = "description"
    LOCATION = "location"
    STATUS = "status"

    @classmethod
    def from_token(cls, token: "str | EventProperty | None") -> "EventProperty":
        """Case-insensitive lookup of a property token such as ``"start"``."""
        if isinstance(token, EventProperty):
            return token
        if token is None:
            raise InvalidOperationError("Property cannot be empty")

        normalized = token.strip().lower()
        if normalized == "visibility":
            return cls.STATUS
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise InvalidOperationError(
                f"Unknown property: '{token}'\nValid properties: {valid}"
            ) from None

    def apply(self, builder: EventBuilder, value: Any) -> EventBuilder:
        """Set this property on ``builder`` from ``value``."""
        if value is None:
            raise InvalidOperationError(f"New value required for property {self.value}")

        if self is EventProperty.SUBJECT:
            return builder.subject(str(value))
        elif self is EventProperty.START:
            return builder.start(parse_datetime(value))
        elif self is EventProperty.END:
            return builder.end(parse_datetime(value))
        elif self is EventProperty.DESCRIPTION:
            return builder.description(str(value))
        elif self is EventProperty.LOCATION:
            return builder.location(str(value))
        return builder.is_public(_coerce_visibility(value))


def _coerce_visibility(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized not in _VISIBILITY:
        raise InvalidOperationError(
            f"Invalid status: '{value}'\nValid values: public, private"
        )
    return _VISIBILITY[normalized]


__all__ = ["EventProperty"]
