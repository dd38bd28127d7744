from __future__ import annotations

import asyncio
import logging
import signal
import sys

from relaykit.observability import configure_logging, configure_otel

from iss_stream.config import StreamSettings, load_stream_settings
from iss_stream.core.exceptions import LogUnavailable
from iss_stream.ingest.loop import IngestLoop
from iss_stream.messaging.kafka_log import KafkaEventLog
from iss_stream.messaging.log import EventLog
from iss_stream.upstream.client import IssPositionClient

logger = logging.getLogger(__name__)


def _build_log(settings: StreamSettings) -> EventLog:
    return KafkaEventLog.from_bootstrap(settings.require_kafka_bootstrap_servers())


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, stop: asyncio.Event) -> None:
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass


async def run_ingest(settings: StreamSettings, log: EventLog, stop: asyncio.Event) -> None:
    source = IssPositionClient(url=settings.ISS_API_URL, timeout_seconds=settings.ISS_FETCH_TIMEOUT_SECONDS)
    ingest = IngestLoop(source=source, log=log, topic=settings.ISS_LOCATION_TOPIC)
    try:
        await ingest.run(interval_seconds=settings.ISS_POLL_INTERVAL_SECONDS, stop_event=stop)
    finally:
        await log.close()
        logger.info("ingest_log_released", extra={"topic": settings.ISS_LOCATION_TOPIC})


async def _main(settings: StreamSettings) -> None:
    stop = asyncio.Event()
    _install_signal_handlers(asyncio.get_running_loop(), stop)
    await run_ingest(settings, _build_log(settings), stop)


def main() -> None:
    settings = load_stream_settings("iss-ingest")
    configure_logging(settings.LOG_LEVEL)
    configure_otel(settings.SERVICE_NAME)
    try:
        asyncio.run(_main(settings))
    except LogUnavailable:
        logger.error("ingest_terminated", extra={"reason": "log_unavailable"})
        sys.exit(1)


if __name__ == "__main__":
    main()
