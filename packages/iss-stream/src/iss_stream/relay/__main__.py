from __future__ import annotations

import uvicorn
from relaykit.observability import configure_logging, configure_otel

from iss_stream.config import load_stream_settings
from iss_stream.relay.app import create_relay_app


def main() -> None:
    settings = load_stream_settings("iss-relay")
    settings.require_kafka_bootstrap_servers()
    configure_logging(settings.LOG_LEVEL)
    configure_otel(settings.SERVICE_NAME)
    app = create_relay_app(settings)
    uvicorn.run(app, host=settings.RELAY_HOST, port=settings.RELAY_PORT, reload=False)


if __name__ == "__main__":
    main()
