"""Index of series occurrences.

Maps a series identifier to the ascending start times of its occurrences so
that series-wide edits don't scan the whole calendar. The calendar's event
list stays the source of truth; this index can always be rebuilt from it.
"""

import bisect
from collections.abc import Iterable
from datetime import datetime

from calbook.event import Event


class SeriesIndex:
    def __init__(self) -> None:
        self._index: dict[str, list[datetime]] = {}

    def __contains__(self, series_id: object) -> bool:
        return series_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def add(self, series_id: str, start: datetime) -> None:
        """Record an occurrence start; recording the same start twice is a no-op."""
        starts = self._index.setdefault(series_id, [])
        idx = bisect.bisect_left(starts, start)
        if idx < len(starts) and starts[idx] == start:
            return
        starts.insert(idx, start)

    def remove(self, series_id: str, start: datetime) -> None:
        """Forget an occurrence start; drops the series once it has none left."""
        starts = self._index.get(series_id)
        if starts is None:
            return
        idx = bisect.bisect_left(starts, start)
        if idx < len(starts) and starts[idx] == start:
            del starts[idx]
        if not starts:
            del self._index[series_id]

    def replace_start(
        self, series_id: str, old_start: datetime, new_start: datetime
    ) -> None:
        self.remove(series_id, old_start)
        self.add(series_id, new_start)

    def starts(self, series_id: str) -> list[datetime]:
        """Ascending starts of a series (a fresh list, empty if unknown)."""
        return list(self._index.get(series_id, ()))

    def series_ids(self) -> list[str]:
        return sorted(self._index)

    def rebuild(self, events: Iterable[Event]) -> None:
        self._index.clear()
        for event in events:
            if event.series_id is not None:
                self.add(event.series_id, event.start)


__all__ = ["SeriesIndex"]
