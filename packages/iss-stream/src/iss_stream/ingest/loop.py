from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from time import perf_counter
from typing import Any, Protocol

from relaykit.clock import now_utc_iso
from relaykit.observability import get_tracer

from iss_stream.core.exceptions import LogUnavailable, MalformedUpstreamResponse, UpstreamUnavailable
from iss_stream.core.metrics import StreamMetricsCollector
from iss_stream.core.models import NormalizedEvent
from iss_stream.messaging.log import EventLog
from iss_stream.messaging.topics import ISS_LOCATION_TOPIC

logger = logging.getLogger(__name__)


class PositionSource(Protocol):
    async def fetch(self) -> dict[str, Any]: ...


class IngestLoop:
    """Fetch-normalize-publish cycle with at most one cycle in flight.

    A tick that starts while another is still running returns immediately
    without touching the upstream source; it is dropped, not queued.
    """

    def __init__(
        self,
        source: PositionSource,
        log: EventLog,
        topic: str = ISS_LOCATION_TOPIC,
        metrics: StreamMetricsCollector | None = None,
        clock: Callable[[], str] = now_utc_iso,
    ) -> None:
        self._source = source
        self._log = log
        self._topic = topic
        self._metrics = metrics
        self._clock = clock
        self._tracer = get_tracer(__name__)
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def tick(self) -> bool:
        """Run one cycle. Returns True when exactly one event was published.

        Raises LogUnavailable when the log rejects the publish.
        """
        if self._in_flight:
            logger.info("ingest_tick_skipped", extra={"reason": "previous_tick_in_flight"})
            if self._metrics:
                self._metrics.increment_skipped_tick()
            return False

        self._in_flight = True
        started = perf_counter()
        outcome = "failed"
        try:
            with self._tracer.start_as_current_span("ingest.tick"):
                payload = await self._source.fetch()
                event = NormalizedEvent.from_upstream(payload, observed_at=self._clock())
                await self._log.publish(self._topic, event)
            outcome = "published"
            if self._metrics:
                self._metrics.increment_published()
            logger.info(
                "ingest_event_published",
                extra={
                    "topic": self._topic,
                    "timestamp": event.source_timestamp,
                    "latitude": event.latitude,
                    "longitude": event.longitude,
                },
            )
            return True
        except UpstreamUnavailable as exc:
            outcome = "upstream_unavailable"
            self._record_upstream_error("unavailable")
            logger.warning("ingest_upstream_unavailable", extra={"error": str(exc)})
            return False
        except MalformedUpstreamResponse as exc:
            outcome = "upstream_malformed"
            self._record_upstream_error("malformed")
            logger.warning("ingest_upstream_malformed", extra={"error": str(exc)})
            return False
        except LogUnavailable as exc:
            outcome = "log_unavailable"
            logger.error("ingest_log_unavailable", extra={"topic": self._topic, "error": str(exc)})
            raise
        except Exception:
            logger.exception("ingest_tick_failed", extra={"topic": self._topic})
            return False
        finally:
            self._in_flight = False
            if self._metrics:
                self._metrics.observe_tick(outcome, (perf_counter() - started) * 1000.0)

    async def run(self, interval_seconds: float, stop_event: asyncio.Event | None = None) -> None:
        """Tick now, then every ``interval_seconds`` until ``stop_event`` is set.

        Each tick runs as its own task so a slow cycle never delays the
        schedule. In-flight ticks are awaited before returning. A tick that
        fails with LogUnavailable stops the schedule and the error is raised.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        stop = stop_event or asyncio.Event()
        pending: set[asyncio.Task[bool]] = set()
        fatal: list[BaseException] = []

        def _on_done(task: asyncio.Task[bool]) -> None:
            pending.discard(task)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                fatal.append(exc)
                stop.set()

        logger.info("ingest_loop_started", extra={"topic": self._topic, "interval_seconds": interval_seconds})
        try:
            while not stop.is_set():
                task = asyncio.create_task(self.tick())
                pending.add(task)
                task.add_done_callback(_on_done)
                try:
                    await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
                except asyncio.TimeoutError:
                    pass
        finally:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.info("ingest_loop_stopped", extra={"topic": self._topic})
        if fatal:
            raise fatal[0]

    def _record_upstream_error(self, kind: str) -> None:
        if self._metrics:
            self._metrics.increment_upstream_error(kind)
