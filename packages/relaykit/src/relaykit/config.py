from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    KAFKA_BOOTSTRAP_SERVERS: str | None = None
    LOG_LEVEL: str = "INFO"

    def require_kafka_bootstrap_servers(self) -> str:
        if not self.KAFKA_BOOTSTRAP_SERVERS:
            raise RuntimeError("missing required environment variable: KAFKA_BOOTSTRAP_SERVERS")
        return self.KAFKA_BOOTSTRAP_SERVERS
