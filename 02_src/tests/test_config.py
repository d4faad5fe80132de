"""Tests for Settings."""

from message_server.config import Settings

ENV_VARS = [
    "DISCORD_WEBHOOK_URL",
    "PYTHON_SERVER_URL",
    "KAFKA_BOOTSTRAP_SERVERS",
    "KAFKA_CLIENT_ID",
    "KAFKA_ERROR_TOPIC",
    "KAFKA_EVENT_TOPIC",
    "KAFKA_REQUEST_TOPIC",
    "KAFKA_CONNECT_TIMEOUT",
    "UPSTREAM_TIMEOUT_SECONDS",
    "WEBHOOK_TIMEOUT_SECONDS",
    "SHUTDOWN_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    """Test values used when nothing is configured."""
    clear_env(monkeypatch)

    settings = Settings.from_env()

    assert settings.discord_webhook_url is None
    assert settings.storage_base_url == "http://localhost:5000"
    assert settings.port == 3000
    assert settings.shutdown_timeout == 10.0
    assert settings.kafka.bootstrap_servers == ["localhost:9092"]
    assert settings.kafka.client_id == "message-server"
    assert settings.kafka.error_topic == "message-server-errors"
    assert settings.kafka.event_topic == "message-server-events"
    assert settings.kafka.request_topic == "message-server-requests"
    assert settings.kafka.connect_timeout == 3.0


def test_overrides(monkeypatch):
    """Test that every variable is honoured."""
    clear_env(monkeypatch)
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.test/hook")
    monkeypatch.setenv("PYTHON_SERVER_URL", "http://storage:5000/")
    monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "k1:9092, k2:9092 ,")
    monkeypatch.setenv("KAFKA_CLIENT_ID", "relay")
    monkeypatch.setenv("KAFKA_ERROR_TOPIC", "errs")
    monkeypatch.setenv("KAFKA_EVENT_TOPIC", "evts")
    monkeypatch.setenv("KAFKA_REQUEST_TOPIC", "reqs")
    monkeypatch.setenv("KAFKA_CONNECT_TIMEOUT", "1.5")
    monkeypatch.setenv("UPSTREAM_TIMEOUT_SECONDS", "4")
    monkeypatch.setenv("WEBHOOK_TIMEOUT_SECONDS", "6")
    monkeypatch.setenv("SHUTDOWN_TIMEOUT_SECONDS", "20")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings.from_env()

    assert settings.discord_webhook_url == "https://discord.test/hook"
    assert settings.storage_base_url == "http://storage:5000"
    assert settings.kafka.bootstrap_servers == ["k1:9092", "k2:9092"]
    assert settings.kafka.client_id == "relay"
    assert settings.kafka.error_topic == "errs"
    assert settings.kafka.event_topic == "evts"
    assert settings.kafka.request_topic == "reqs"
    assert settings.kafka.connect_timeout == 1.5
    assert settings.upstream_timeout == 4.0
    assert settings.webhook_timeout == 6.0
    assert settings.shutdown_timeout == 20.0
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080


def test_invalid_timeout_falls_back(monkeypatch):
    """Test that unparseable numbers keep the default."""
    clear_env(monkeypatch)
    monkeypatch.setenv("KAFKA_CONNECT_TIMEOUT", "soon")

    assert Settings.from_env().kafka.connect_timeout == 3.0


def test_blank_webhook_is_unset(monkeypatch):
    """Test that an empty webhook URL counts as missing."""
    clear_env(monkeypatch)
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "")

    assert Settings.from_env().discord_webhook_url is None
