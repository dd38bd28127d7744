from __future__ import annotations

import asyncio
import logging

from iss_stream.core.exceptions import LogUnavailable, MalformedEventError
from iss_stream.core.metrics import StreamMetricsCollector
from iss_stream.core.models import NormalizedEvent
from iss_stream.messaging.log import EventSubscription
from iss_stream.relay.broadcaster import BroadcastRelay

logger = logging.getLogger(__name__)


class RelayConsumer:
    """Receive loop from the log subscription into the broadcast relay.

    One payload is handled per iteration, in the order the log yields them.
    """

    def __init__(
        self,
        subscription: EventSubscription,
        relay: BroadcastRelay,
        metrics: StreamMetricsCollector | None = None,
    ) -> None:
        self._subscription = subscription
        self._relay = relay
        self._metrics = metrics
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def handle_payload(self, value: bytes | None) -> int:
        try:
            event = NormalizedEvent.decode(value)
        except MalformedEventError as exc:
            if self._metrics:
                self._metrics.increment_malformed_event()
            logger.warning(
                "relay_event_malformed",
                extra={"error": str(exc), "raw_value": _preview(value)},
            )
            return 0
        if self._metrics:
            self._metrics.increment_consumed()
        return await self._relay.on_event(event)

    async def run(self) -> None:
        """Consume until the subscription ends or is cancelled.

        Raises LogUnavailable when the subscription itself fails. Errors while
        handling a single record are not subscription failures.
        """
        self._running = True
        logger.info("relay_consumer_started")
        payloads = self._subscription.payloads().__aiter__()
        try:
            while True:
                try:
                    value = await payloads.__anext__()
                except StopAsyncIteration:
                    break
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("relay_log_unavailable", extra={"error": str(exc)})
                    raise LogUnavailable(f"log subscription failed: {exc}") from exc
                await self.handle_payload(value)
        finally:
            self._running = False
            await self._subscription.close()
            logger.info("relay_consumer_stopped")


def _preview(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")[:200]
    return repr(value)[:200]
