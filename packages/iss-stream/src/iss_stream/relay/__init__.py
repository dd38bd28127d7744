"""Consume-and-broadcast relay."""

from iss_stream.relay.app import VIEWER_WS_PATH, create_relay_app
from iss_stream.relay.broadcaster import BroadcastRelay
from iss_stream.relay.consumer import RelayConsumer
from iss_stream.relay.hub import ConnectionHub, ViewerConnection

__all__ = [
    "BroadcastRelay",
    "ConnectionHub",
    "RelayConsumer",
    "VIEWER_WS_PATH",
    "ViewerConnection",
    "create_relay_app",
]
