"""Durable log adapters."""

from iss_stream.messaging.kafka_log import KafkaEventLog, KafkaEventSubscription
from iss_stream.messaging.log import EventLog, EventSubscription, InMemoryEventLog, InMemorySubscription
from iss_stream.messaging.topics import ISS_LOCATION_TOPIC

__all__ = [
    "EventLog",
    "EventSubscription",
    "InMemoryEventLog",
    "InMemorySubscription",
    "ISS_LOCATION_TOPIC",
    "KafkaEventLog",
    "KafkaEventSubscription",
]
