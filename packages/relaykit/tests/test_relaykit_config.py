import pytest

from relaykit.config import ServiceSettings


def test_service_settings_read_env(monkeypatch) -> None:
    monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = ServiceSettings(SERVICE_NAME="iss-ingest")

    assert settings.SERVICE_NAME == "iss-ingest"
    assert settings.KAFKA_BOOTSTRAP_SERVERS == "kafka:9092"
    assert settings.LOG_LEVEL == "debug"
    assert settings.require_kafka_bootstrap_servers() == "kafka:9092"


def test_require_kafka_bootstrap_servers_raises_when_missing(monkeypatch) -> None:
    monkeypatch.delenv("KAFKA_BOOTSTRAP_SERVERS", raising=False)
    settings = ServiceSettings(SERVICE_NAME="iss-relay")

    with pytest.raises(RuntimeError, match="KAFKA_BOOTSTRAP_SERVERS"):
        settings.require_kafka_bootstrap_servers()
