"""Exception types raised by the calendar engine."""


class InvalidOperationError(ValueError):
    """Raised when an engine operation is rejected.

    Every validation failure in calbook (blank subjects, duplicate events,
    ambiguous lookups, unknown calendars, ...) surfaces as this single type.
    It subclasses ValueError so callers that already guard against
    ValueError keep working.
    """


__all__ = ["InvalidOperationError"]
