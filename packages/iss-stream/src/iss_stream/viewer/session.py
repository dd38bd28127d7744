from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from iss_stream.core.exceptions import MalformedEventError
from iss_stream.core.models import NormalizedEvent
from iss_stream.viewer.window import ViewerWindow

logger = logging.getLogger(__name__)

_RECONNECTABLE_ERRORS = (ConnectionClosed, InvalidHandshake, OSError, asyncio.TimeoutError)


class ViewerSession:
    """Live view of one relay connection.

    Every received frame is pushed into the window. A lost or refused
    connection is retried without limit, pausing ``reconnect_delay_seconds``
    between attempts, until ``stop()`` is called.
    """

    def __init__(
        self,
        url: str,
        window: ViewerWindow,
        reconnect_delay_seconds: float = 3.0,
        on_update: Callable[[ViewerWindow], None] | None = None,
        connect_fn: Callable[[str], Any] = websockets.connect,
        sleep_fn=asyncio.sleep,
    ) -> None:
        self._url = url
        self._window = window
        self._reconnect_delay_seconds = reconnect_delay_seconds
        self._on_update = on_update
        self._connect = connect_fn
        self._sleep = sleep_fn
        self._stopped = asyncio.Event()
        self.connect_attempts = 0

    @property
    def window(self) -> ViewerWindow:
        return self._window

    def stop(self) -> None:
        self._stopped.set()

    def handle_frame(self, frame: str | bytes) -> bool:
        raw = frame.encode("utf-8") if isinstance(frame, str) else frame
        try:
            event = NormalizedEvent.decode(raw)
        except MalformedEventError as exc:
            logger.warning("viewer_frame_malformed", extra={"error": str(exc)})
            return False
        self._window.push(event)
        if self._on_update:
            self._on_update(self._window)
        return True

    async def run(self) -> None:
        while not self._stopped.is_set():
            self.connect_attempts += 1
            try:
                async with self._connect(self._url) as connection:
                    logger.info("viewer_connected", extra={"url": self._url})
                    async for frame in connection:
                        self.handle_frame(frame)
                        if self._stopped.is_set():
                            return
                logger.info("viewer_connection_closed", extra={"url": self._url})
            except _RECONNECTABLE_ERRORS as exc:
                logger.warning("viewer_connection_lost", extra={"url": self._url, "error": str(exc)})
            if self._stopped.is_set():
                return
            await self._sleep(self._reconnect_delay_seconds)
