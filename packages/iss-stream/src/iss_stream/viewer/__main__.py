from __future__ import annotations

import asyncio
import contextlib
import signal

from relaykit.observability import configure_logging

from iss_stream.config import load_stream_settings
from iss_stream.viewer.session import ViewerSession
from iss_stream.viewer.window import ViewerWindow

_CLEAR_SCREEN = "\x1b[2J\x1b[H"


def redraw(window: ViewerWindow) -> None:
    lines = window.lines()
    body = "\n".join(lines) if lines else "Waiting for the first position..."
    print(f"{_CLEAR_SCREEN}ISS Location (latest {window.capacity})\n\n{body}", flush=True)


async def _main() -> None:
    settings = load_stream_settings("iss-viewer")
    configure_logging(settings.LOG_LEVEL)
    session = ViewerSession(
        url=settings.VIEWER_RELAY_URL,
        window=ViewerWindow(capacity=settings.VIEWER_WINDOW_CAPACITY),
        reconnect_delay_seconds=settings.VIEWER_RECONNECT_DELAY_SECONDS,
        on_update=redraw,
    )
    task = asyncio.create_task(session.run())
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, task.cancel)
    with contextlib.suppress(asyncio.CancelledError):
        await task


def main() -> None:
    asyncio.run(_main())


if __name__ == "__main__":
    main()
