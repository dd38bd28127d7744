from __future__ import annotations

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from iss_stream.core.metrics import StreamMetricsCollector


class StreamPrometheusExporter:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._tick_duration = Gauge(
            "iss_ingest_tick_duration_ms",
            "Latest ingest tick duration in milliseconds",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._ticks_total = Gauge(
            "iss_ingest_ticks_total",
            "Ingest ticks grouped by outcome",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._upstream_errors = Gauge(
            "iss_upstream_errors_total",
            "Upstream fetch failures grouped by kind",
            labelnames=("kind",),
            registry=self._registry,
        )
        self._skipped_ticks = Gauge(
            "iss_ingest_skipped_ticks_total",
            "Ticks dropped because a previous tick was still in flight",
            registry=self._registry,
        )
        self._published = Gauge(
            "iss_published_events_total",
            "Events published to the log",
            registry=self._registry,
        )
        self._consumed = Gauge(
            "iss_relay_consumed_events_total",
            "Events consumed from the log by the relay",
            registry=self._registry,
        )
        self._malformed = Gauge(
            "iss_relay_malformed_events_total",
            "Log payloads skipped because they did not decode",
            registry=self._registry,
        )
        self._deliveries = Gauge(
            "iss_broadcast_deliveries_total",
            "Frames delivered to viewer connections",
            registry=self._registry,
        )
        self._failures = Gauge(
            "iss_broadcast_failures_total",
            "Frames that failed to reach a viewer connection",
            registry=self._registry,
        )
        self._open_connections = Gauge(
            "iss_viewer_connections",
            "Currently open viewer connections",
            registry=self._registry,
        )

    def render(self, metrics: StreamMetricsCollector) -> str:
        latest_by_outcome: dict[str, float] = {}
        for item in metrics.tick_durations:
            latest_by_outcome[item.outcome] = item.duration_ms
        for outcome, duration in latest_by_outcome.items():
            self._tick_duration.labels(outcome=outcome).set(duration)
        for outcome, count in metrics.ticks_total.items():
            self._ticks_total.labels(outcome=outcome).set(count)
        for kind, count in metrics.upstream_errors_total.items():
            self._upstream_errors.labels(kind=kind).set(count)
        self._skipped_ticks.set(metrics.skipped_ticks)
        self._published.set(metrics.published_events)
        self._consumed.set(metrics.consumed_events)
        self._malformed.set(metrics.malformed_events)
        self._deliveries.set(metrics.broadcast_deliveries)
        self._failures.set(metrics.broadcast_failures)
        self._open_connections.set(metrics.open_connections)
        return generate_latest(self._registry).decode("utf-8")
