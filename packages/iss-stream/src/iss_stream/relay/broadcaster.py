from __future__ import annotations

import asyncio
import json
import logging

from iss_stream.core.exceptions import BroadcastSendFailure
from iss_stream.core.metrics import StreamMetricsCollector
from iss_stream.core.models import NormalizedEvent
from iss_stream.relay.hub import ConnectionHub, ViewerConnection

logger = logging.getLogger(__name__)


class BroadcastRelay:
    def __init__(
        self,
        hub: ConnectionHub,
        send_timeout_seconds: float = 5.0,
        metrics: StreamMetricsCollector | None = None,
    ) -> None:
        self._hub = hub
        self._send_timeout_seconds = send_timeout_seconds
        self._metrics = metrics

    async def on_event(self, event: NormalizedEvent) -> int:
        """Send ``event`` to every open connection; returns the delivery count.

        A failed send affects only its own connection and is never raised.
        """
        frame = json.dumps(event.to_wire())
        connections = self._hub.snapshot()
        if not connections:
            return 0
        results = await asyncio.gather(
            *(self._send(connection, frame) for connection in connections),
            return_exceptions=True,
        )
        delivered = 0
        failed = 0
        for result in results:
            if result is True:
                delivered += 1
                continue
            failed += 1
            logger.warning("broadcast_send_failed", extra={"error": str(result)})
        if self._metrics:
            self._metrics.add_broadcast_result(delivered=delivered, failed=failed)
        return delivered

    async def _send(self, connection: ViewerConnection, frame: str) -> bool:
        try:
            await asyncio.wait_for(connection.send_text(frame), timeout=self._send_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise BroadcastSendFailure("viewer send timed out") from exc
        except Exception as exc:
            raise BroadcastSendFailure(f"viewer send failed: {exc}") from exc
        return True
