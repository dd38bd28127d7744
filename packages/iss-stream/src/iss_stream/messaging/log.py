from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import AsyncIterator

from iss_stream.core.models import NormalizedEvent


class EventLog(ABC):
    @abstractmethod
    async def publish(self, topic: str, event: NormalizedEvent) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class EventSubscription(ABC):
    @abstractmethod
    def payloads(self) -> AsyncIterator[bytes]:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class InMemoryEventLog(EventLog):
    def __init__(self) -> None:
        self.published: dict[str, list[bytes]] = defaultdict(list)

    async def publish(self, topic: str, event: NormalizedEvent) -> None:
        self.published[topic].append(event.encode())


class InMemorySubscription(EventSubscription):
    """Replays a fixed list of payloads, then ends."""

    def __init__(self, payloads: list[bytes]) -> None:
        self._payloads = list(payloads)
        self.closed = False

    async def payloads(self) -> AsyncIterator[bytes]:
        for payload in self._payloads:
            yield payload

    async def close(self) -> None:
        self.closed = True
