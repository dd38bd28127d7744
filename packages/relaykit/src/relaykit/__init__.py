"""Common runtime kit for streaming service infrastructure concerns."""

from relaykit.clock import now_utc, now_utc_iso, to_iso_millis
from relaykit.config import ServiceSettings
from relaykit.kafka import (
    AsyncKafkaConsumerManager,
    AsyncKafkaProducerManager,
    create_consumer,
    create_producer,
    run_with_retry,
)
from relaykit.observability import (
    configure_logging,
    configure_otel,
    configure_probe_access_log_filter,
    get_tracer,
)

__all__ = [
    "AsyncKafkaConsumerManager",
    "AsyncKafkaProducerManager",
    "ServiceSettings",
    "configure_logging",
    "configure_otel",
    "configure_probe_access_log_filter",
    "create_consumer",
    "create_producer",
    "get_tracer",
    "now_utc",
    "now_utc_iso",
    "run_with_retry",
    "to_iso_millis",
]
