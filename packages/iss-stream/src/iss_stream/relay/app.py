from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response, WebSocket
from fastapi.responses import HTMLResponse, JSONResponse
from relaykit.observability import configure_probe_access_log_filter

from iss_stream.config import StreamSettings
from iss_stream.core.metrics import StreamMetricsCollector
from iss_stream.core.prometheus_exporter import StreamPrometheusExporter
from iss_stream.messaging.kafka_log import KafkaEventSubscription
from iss_stream.messaging.log import EventSubscription
from iss_stream.relay.broadcaster import BroadcastRelay
from iss_stream.relay.consumer import RelayConsumer
from iss_stream.relay.dashboard import render_dashboard
from iss_stream.relay.hub import GOING_AWAY, ConnectionHub

logger = logging.getLogger(__name__)

VIEWER_WS_PATH = "/ws/iss-location"

SubscriptionFactory = Callable[[StreamSettings], EventSubscription]


def kafka_subscription_factory(settings: StreamSettings) -> EventSubscription:
    return KafkaEventSubscription.from_bootstrap(
        bootstrap_servers=settings.require_kafka_bootstrap_servers(),
        topic=settings.ISS_LOCATION_TOPIC,
        group_id=settings.RELAY_CONSUMER_GROUP,
    )


def _terminate_process(exc: BaseException) -> None:
    del exc
    os.kill(os.getpid(), signal.SIGTERM)


def create_relay_app(
    settings: StreamSettings | None = None,
    subscription_factory: SubscriptionFactory = kafka_subscription_factory,
    metrics: StreamMetricsCollector | None = None,
    on_fatal: Callable[[BaseException], None] = _terminate_process,
) -> FastAPI:
    settings = settings or StreamSettings(SERVICE_NAME="iss-relay")
    metrics = metrics or StreamMetricsCollector()
    hub = ConnectionHub()
    relay = BroadcastRelay(hub, send_timeout_seconds=settings.RELAY_SEND_TIMEOUT_SECONDS, metrics=metrics)
    exporter = StreamPrometheusExporter()

    def _on_consumer_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            logger.info("relay_subscription_ended")
            return
        logger.error("relay_terminating", extra={"reason": "log_unavailable", "error": str(exc)})
        on_fatal(exc)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        consumer = RelayConsumer(subscription_factory(settings), relay, metrics=metrics)
        app.state.consumer = consumer
        task = asyncio.create_task(consumer.run())
        task.add_done_callback(_on_consumer_done)
        try:
            yield
        finally:
            # viewers first, then the log subscription
            await hub.close_all()
            metrics.set_open_connections(0)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.info("relay_shutdown_complete")

    app = FastAPI(title="ISS Location Relay", version="0.1.0", lifespan=lifespan)
    configure_probe_access_log_filter()
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.hub = hub
    app.state.relay = relay
    app.state.consumer = None

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/readyz")
    async def readyz() -> JSONResponse:
        consumer = app.state.consumer
        if consumer is None or not consumer.running:
            return JSONResponse(status_code=503, content={"status": "not_ready"})
        return JSONResponse(content={"status": "ready"})

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        body = exporter.render(metrics)
        return Response(content=body, media_type="text/plain; version=0.0.4")

    @app.get("/", response_class=HTMLResponse)
    async def dashboard() -> str:
        return render_dashboard(
            capacity=settings.VIEWER_WINDOW_CAPACITY,
            reconnect_delay_seconds=settings.VIEWER_RECONNECT_DELAY_SECONDS,
            ws_path=VIEWER_WS_PATH,
        )

    @app.websocket(VIEWER_WS_PATH)
    async def viewer_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        if not hub.register(websocket):
            await websocket.close(code=GOING_AWAY)
            return
        metrics.set_open_connections(len(hub))
        try:
            while True:
                # client frames carry no meaning; read only to notice the close
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            hub.unregister(websocket)
            metrics.set_open_connections(len(hub))

    return app
