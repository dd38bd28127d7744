from __future__ import annotations

from collections.abc import AsyncIterator

from relaykit.kafka import AsyncKafkaConsumerManager, AsyncKafkaProducerManager

from iss_stream.core.exceptions import LogUnavailable
from iss_stream.core.models import NormalizedEvent
from iss_stream.messaging.log import EventLog, EventSubscription


class KafkaEventLog(EventLog):
    def __init__(self, producer: AsyncKafkaProducerManager) -> None:
        self._producer = producer

    @classmethod
    def from_bootstrap(cls, bootstrap_servers: str) -> KafkaEventLog:
        return cls(AsyncKafkaProducerManager(bootstrap_servers, client_id="iss-producer"))

    async def publish(self, topic: str, event: NormalizedEvent) -> None:
        try:
            await self._producer.send_and_wait(topic, event.encode())
        except Exception as exc:
            raise LogUnavailable(f"publish to '{topic}' failed: {exc}") from exc

    async def close(self) -> None:
        await self._producer.stop()


class KafkaEventSubscription(EventSubscription):
    def __init__(self, consumer: AsyncKafkaConsumerManager) -> None:
        self._consumer = consumer

    @classmethod
    def from_bootstrap(cls, bootstrap_servers: str, topic: str, group_id: str) -> KafkaEventSubscription:
        return cls(AsyncKafkaConsumerManager(topic=topic, group_id=group_id, bootstrap_servers=bootstrap_servers))

    async def payloads(self) -> AsyncIterator[bytes]:
        async for value in self._consumer.stream():
            yield value

    async def close(self) -> None:
        await self._consumer.stop()
