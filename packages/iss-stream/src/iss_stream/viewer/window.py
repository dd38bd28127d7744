from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from iss_stream.core.models import NormalizedEvent


@dataclass(frozen=True)
class ViewerRow:
    event: NormalizedEvent
    text: str


def render_row(event: NormalizedEvent) -> str:
    return (
        f"{event.observed_at}  ISS Location  "
        f"Latitude: {event.latitude:.4f}°  Longitude: {event.longitude:.4f}°"
    )


class ViewerWindow:
    """Most-recent-first rows, bounded at ``capacity``.

    New rows go to the front; when the window overflows the single oldest
    row is evicted from the back.
    """

    def __init__(self, capacity: int = 10) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._capacity = capacity
        self._rows: deque[ViewerRow] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, event: NormalizedEvent) -> ViewerRow | None:
        """Insert ``event`` and return the evicted row, if any."""
        self._rows.appendleft(ViewerRow(event=event, text=render_row(event)))
        if len(self._rows) > self._capacity:
            return self._rows.pop()
        return None

    def events(self) -> list[NormalizedEvent]:
        return [row.event for row in self._rows]

    def lines(self) -> list[str]:
        return [row.text for row in self._rows]

    def __iter__(self) -> Iterator[ViewerRow]:
        return iter(list(self._rows))

    def __len__(self) -> int:
        return len(self._rows)
