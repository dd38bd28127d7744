from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class TickDuration:
    outcome: str
    duration_ms: float


class StreamMetricsCollector:
    def __init__(self) -> None:
        self.tick_durations: list[TickDuration] = []
        self.ticks_total: dict[str, int] = defaultdict(int)
        self.upstream_errors_total: dict[str, int] = defaultdict(int)
        self.skipped_ticks = 0
        self.published_events = 0
        self.consumed_events = 0
        self.malformed_events = 0
        self.broadcast_deliveries = 0
        self.broadcast_failures = 0
        self.open_connections = 0

    def observe_tick(self, outcome: str, duration_ms: float) -> None:
        self.ticks_total[outcome] += 1
        self.tick_durations.append(TickDuration(outcome=outcome, duration_ms=duration_ms))

    def increment_skipped_tick(self) -> None:
        self.skipped_ticks += 1

    def increment_upstream_error(self, kind: str) -> None:
        self.upstream_errors_total[kind] += 1

    def increment_published(self) -> None:
        self.published_events += 1

    def increment_consumed(self) -> None:
        self.consumed_events += 1

    def increment_malformed_event(self) -> None:
        self.malformed_events += 1

    def add_broadcast_result(self, delivered: int, failed: int) -> None:
        self.broadcast_deliveries += delivered
        self.broadcast_failures += failed

    def set_open_connections(self, count: int) -> None:
        self.open_connections = count
