"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import httpx
import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from message_server.config import KafkaSettings, Settings  # noqa: E402


class FakeBus:
    """In-memory stand-in for the telemetry bus client."""

    def __init__(self, connected: bool = True):
        self.connected = connected
        self.sent: list[tuple] = []
        self.initialize_calls = 0
        self.shutdown_calls = 0

    async def initialize(self) -> None:
        self.initialize_calls += 1

    async def send(self, topic, record, correlation_id=None) -> bool:
        if not self.connected:
            return False
        self.sent.append((topic, record, correlation_id))
        return True

    async def shutdown(self) -> None:
        self.shutdown_calls += 1

    def records(self, topic: str) -> list:
        return [record for t, record, _ in self.sent if t == topic]


class Upstream:
    """Scripted storage service and webhook behind one httpx.MockTransport."""

    def __init__(self):
        self.pdf = b"%PDF-1.4" + b"0" * 2040  # 2048 bytes
        self.storage_status = 200
        self.webhook_status = 204
        self.storage_calls: list[httpx.Request] = []
        self.webhook_calls: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "storage.test":
            self.storage_calls.append(request)
            if self.storage_status != 200:
                return httpx.Response(self.storage_status, text="not found")
            return httpx.Response(200, content=self.pdf)
        if request.url.host == "discord.test":
            request.read()
            self.webhook_calls.append(request)
            return httpx.Response(self.webhook_status)
        return httpx.Response(599)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fake_bus():
    """Connected in-memory bus."""
    return FakeBus()


@pytest.fixture
def make_bus():
    """Factory for extra buses in a single test."""
    return FakeBus


@pytest.fixture
def kafka_settings():
    """Default topic names."""
    return KafkaSettings()


@pytest.fixture
def settings(kafka_settings):
    """Settings pointing at the scripted upstreams."""
    return Settings(
        discord_webhook_url="https://discord.test/api/webhooks/1/token",
        storage_base_url="http://storage.test",
        shutdown_timeout=2.0,
        kafka=kafka_settings,
    )


@pytest.fixture
def upstream():
    """Scripted storage + webhook."""
    return Upstream()


@pytest.fixture
def http_client(upstream):
    """httpx client routed to the scripted upstreams."""
    return httpx.AsyncClient(transport=upstream.transport())
