from __future__ import annotations

import json
from collections.abc import AsyncIterator

import pytest

from iss_stream.core.exceptions import LogUnavailable
from iss_stream.core.metrics import StreamMetricsCollector
from iss_stream.core.models import NormalizedEvent
from iss_stream.messaging.log import EventSubscription, InMemorySubscription
from iss_stream.relay.broadcaster import BroadcastRelay
from iss_stream.relay.consumer import RelayConsumer
from iss_stream.relay.hub import ConnectionHub


class RecordingConnection:
    def __init__(self) -> None:
        self.frames: list[dict] = []

    async def send_text(self, data: str) -> None:
        self.frames.append(json.loads(data))

    async def close(self, code: int = 1000) -> None:
        return None


class BrokenSubscription(EventSubscription):
    def __init__(self, before_failure: list[bytes]) -> None:
        self._before_failure = before_failure
        self.closed = False

    async def payloads(self) -> AsyncIterator[bytes]:
        for payload in self._before_failure:
            yield payload
        raise ConnectionError("broker connection lost")

    async def close(self) -> None:
        self.closed = True


def _payload(timestamp: int) -> bytes:
    return NormalizedEvent(
        source_timestamp=timestamp,
        latitude=10.5,
        longitude=-20.25,
        observed_at="2026-01-15T22:40:00.000Z",
    ).encode()


def _consumer(subscription: EventSubscription, metrics: StreamMetricsCollector | None = None):
    hub = ConnectionHub()
    connection = RecordingConnection()
    hub.register(connection)
    return RelayConsumer(subscription, BroadcastRelay(hub), metrics=metrics), connection


@pytest.mark.asyncio
async def test_consumer_broadcasts_in_log_order_and_closes_subscription() -> None:
    subscription = InMemorySubscription([_payload(1), _payload(2), _payload(3)])
    metrics = StreamMetricsCollector()
    consumer, connection = _consumer(subscription, metrics)

    await consumer.run()

    assert [frame["timestamp"] for frame in connection.frames] == [1, 2, 3]
    assert subscription.closed is True
    assert consumer.running is False
    assert metrics.consumed_events == 3


@pytest.mark.asyncio
async def test_consumer_skips_malformed_payloads() -> None:
    subscription = InMemorySubscription([b"not-json", b'{"timestamp": 1}', _payload(7)])
    metrics = StreamMetricsCollector()
    consumer, connection = _consumer(subscription, metrics)

    await consumer.run()

    assert [frame["timestamp"] for frame in connection.frames] == [7]
    assert metrics.malformed_events == 2


@pytest.mark.asyncio
async def test_consumer_wraps_subscription_failure_as_log_unavailable() -> None:
    subscription = BrokenSubscription([_payload(1)])
    consumer, connection = _consumer(subscription)

    with pytest.raises(LogUnavailable):
        await consumer.run()

    assert [frame["timestamp"] for frame in connection.frames] == [1]
    assert subscription.closed is True


@pytest.mark.asyncio
async def test_handle_payload_returns_delivery_count() -> None:
    consumer, _ = _consumer(InMemorySubscription([]))

    assert await consumer.handle_payload(_payload(1)) == 1
    assert await consumer.handle_payload(b"\x00") == 0


@pytest.mark.asyncio
async def test_consumer_skips_unusable_records_mid_stream_and_keeps_running() -> None:
    overflowing = b'{"timestamp": 2, "latitude": ' + b"9" * 400 + b', "longitude": 1.0, "eventTime": "t"}'
    subscription = InMemorySubscription(
        [
            _payload(1),
            None,
            b'{"timestamp": 3, "latitude": NaN, "longitude": 1.0, "eventTime": "t"}',
            overflowing,
            _payload(4),
        ]
    )
    metrics = StreamMetricsCollector()
    consumer, connection = _consumer(subscription, metrics)

    await consumer.run()

    assert [frame["timestamp"] for frame in connection.frames] == [1, 4]
    assert metrics.malformed_events == 3
    assert metrics.consumed_events == 2
    assert subscription.closed is True
