"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "message-server.log"
DEFAULT_ERROR_LOG_PATH = LOGS_DIR / "error.log"

SERVICE_NAME = "message-server"

DEFAULT_BROKERS = ["localhost:9092"]
DEFAULT_ERROR_TOPIC = "message-server-errors"
DEFAULT_EVENT_TOPIC = "message-server-events"
DEFAULT_REQUEST_TOPIC = "message-server-requests"


def _split_brokers(raw: str | None) -> list[str]:
    if not raw:
        return list(DEFAULT_BROKERS)
    brokers = [host.strip() for host in raw.split(",") if host.strip()]
    return brokers or list(DEFAULT_BROKERS)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class KafkaSettings:
    """Telemetry bus connection and topic names."""

    bootstrap_servers: list[str] = field(default_factory=lambda: list(DEFAULT_BROKERS))
    client_id: str = SERVICE_NAME
    error_topic: str = DEFAULT_ERROR_TOPIC
    event_topic: str = DEFAULT_EVENT_TOPIC
    request_topic: str = DEFAULT_REQUEST_TOPIC
    connect_timeout: float = 3.0


@dataclass(frozen=True)
class Settings:
    """Typed configuration surface for the message server."""

    discord_webhook_url: str | None = None
    storage_base_url: str = "http://localhost:5000"
    upstream_timeout: float = 10.0
    webhook_timeout: float = 10.0
    shutdown_timeout: float = 10.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    kafka: KafkaSettings = field(default_factory=KafkaSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings instance by reading environment variables once."""
        kafka = KafkaSettings(
            bootstrap_servers=_split_brokers(os.getenv("KAFKA_BOOTSTRAP_SERVERS")),
            client_id=os.getenv("KAFKA_CLIENT_ID") or SERVICE_NAME,
            error_topic=os.getenv("KAFKA_ERROR_TOPIC") or DEFAULT_ERROR_TOPIC,
            event_topic=os.getenv("KAFKA_EVENT_TOPIC") or DEFAULT_EVENT_TOPIC,
            request_topic=os.getenv("KAFKA_REQUEST_TOPIC") or DEFAULT_REQUEST_TOPIC,
            connect_timeout=_float_env("KAFKA_CONNECT_TIMEOUT", 3.0),
        )

        return cls(
            discord_webhook_url=os.getenv("DISCORD_WEBHOOK_URL") or None,
            storage_base_url=(
                os.getenv("PYTHON_SERVER_URL") or "http://localhost:5000"
            ).rstrip("/"),
            upstream_timeout=_float_env("UPSTREAM_TIMEOUT_SECONDS", 10.0),
            webhook_timeout=_float_env("WEBHOOK_TIMEOUT_SECONDS", 10.0),
            shutdown_timeout=_float_env("SHUTDOWN_TIMEOUT_SECONDS", 10.0),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            kafka=kafka,
        )
