from __future__ import annotations

from pydantic import Field
from relaykit.config import ServiceSettings

from iss_stream.messaging.topics import ISS_LOCATION_TOPIC


class StreamSettings(ServiceSettings):
    ISS_API_URL: str = "http://api.open-notify.org/iss-now.json"
    ISS_FETCH_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    ISS_POLL_INTERVAL_SECONDS: float = Field(default=30.0, gt=0)
    ISS_LOCATION_TOPIC: str = ISS_LOCATION_TOPIC
    RELAY_CONSUMER_GROUP: str = "iss-relay"
    RELAY_SEND_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    RELAY_HOST: str = "0.0.0.0"
    RELAY_PORT: int = Field(default=8080, gt=0)
    VIEWER_WINDOW_CAPACITY: int = Field(default=10, gt=0)
    VIEWER_RELAY_URL: str = "ws://localhost:8080/ws/iss-location"
    VIEWER_RECONNECT_DELAY_SECONDS: float = Field(default=3.0, ge=0)


def load_stream_settings(service_name: str) -> StreamSettings:
    return StreamSettings(SERVICE_NAME=service_name)
