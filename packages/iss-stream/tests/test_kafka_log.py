from __future__ import annotations

import json

import pytest

from iss_stream.core.exceptions import LogUnavailable
from iss_stream.core.models import NormalizedEvent
from iss_stream.messaging.kafka_log import KafkaEventLog, KafkaEventSubscription

EVENT = NormalizedEvent(
    source_timestamp=1705332000,
    latitude=48.8566,
    longitude=2.3522,
    observed_at="2026-01-15T22:40:00.000Z",
)


class FakeProducerManager:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, bytes]] = []
        self.stopped = False

    async def send_and_wait(self, topic: str, payload: bytes) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((topic, payload))

    async def stop(self) -> None:
        self.stopped = True


class FakeConsumerManager:
    def __init__(self, values: list[bytes]) -> None:
        self._values = values
        self.stopped = False

    async def stream(self):
        for value in self._values:
            yield value

    async def stop(self) -> None:
        self.stopped = True


@pytest.mark.asyncio
async def test_kafka_log_publishes_utf8_json_wire_payload() -> None:
    producer = FakeProducerManager()
    log = KafkaEventLog(producer)

    await log.publish("iss-location", EVENT)
    await log.close()

    topic, payload = producer.sent[0]
    assert topic == "iss-location"
    assert json.loads(payload.decode("utf-8")) == EVENT.to_wire()
    assert producer.stopped is True


@pytest.mark.asyncio
async def test_kafka_log_wraps_broker_failure_as_log_unavailable() -> None:
    log = KafkaEventLog(FakeProducerManager(error=RuntimeError("KafkaConnectionError")))

    with pytest.raises(LogUnavailable, match="iss-location"):
        await log.publish("iss-location", EVENT)


@pytest.mark.asyncio
async def test_kafka_subscription_yields_values_and_stops_consumer() -> None:
    consumer = FakeConsumerManager([EVENT.encode()])
    subscription = KafkaEventSubscription(consumer)

    values = [value async for value in subscription.payloads()]
    await subscription.close()

    assert [NormalizedEvent.decode(value) for value in values] == [EVENT]
    assert consumer.stopped is True
