"""Application bootstrap and lifecycle management."""

import socket
from typing import Protocol

import httpx

from .bus import ITelemetryBus, TelemetryBusClient
from .clients import StorageClient, WebhookClient
from .config import Settings
from .logging_config import get_logger
from .orchestrator import IMessageOrchestrator, MessageOrchestrator
from .telemetry import TelemetryLoggers

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        bus: ITelemetryBus | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or Settings.from_env()

        # The bus and telemetry exist before start() so middleware can bind to them
        self._bus: ITelemetryBus = bus or TelemetryBusClient(self.settings.kafka)
        self.telemetry = TelemetryLoggers.create(self._bus, self.settings.kafka)

        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._orchestrator: IMessageOrchestrator | None = None
        self._shutdown_clean = True

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Telemetry bus (never fatal)
        await self._bus.initialize()

        # 2. Shared HTTP client
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()

        # 3. Upstream storage + outbound webhook
        storage = StorageClient(
            self._http_client,
            base_url=self.settings.storage_base_url,
            timeout=self.settings.upstream_timeout,
        )
        webhook = None
        if self.settings.discord_webhook_url:
            webhook = WebhookClient(
                self._http_client,
                self.settings.discord_webhook_url,
                timeout=self.settings.webhook_timeout,
            )
        else:
            logger.warning("DISCORD_WEBHOOK_URL is not set; relays will fail")

        # 4. Orchestrator
        self._orchestrator = MessageOrchestrator(
            storage=storage,
            webhook=webhook,
            telemetry=self.telemetry,
            server_host=socket.gethostname(),
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order. Failures are logged and remembered."""
        try:
            await self.telemetry.dispatcher.drain(
                timeout=self.settings.shutdown_timeout / 2
            )
        except Exception as e:
            self._shutdown_clean = False
            logger.error("Error draining telemetry: %s", e)

        try:
            await self._bus.shutdown()
        except Exception as e:
            self._shutdown_clean = False
            logger.error("Error shutting down telemetry bus: %s", e)

        if self._http_client is not None and self._owns_http_client:
            try:
                await self._http_client.aclose()
            except Exception as e:
                self._shutdown_clean = False
                logger.error("Error closing HTTP client: %s", e)
            self._http_client = None

        logger.info("Application stopped")

    @property
    def shutdown_clean(self) -> bool:
        """False when any step of stop() failed."""
        return self._shutdown_clean

    @property
    def bus(self) -> ITelemetryBus:
        """Get telemetry bus instance."""
        return self._bus

    @property
    def orchestrator(self) -> IMessageOrchestrator:
        """Get orchestrator instance."""
        if not self._orchestrator:
            raise RuntimeError("Application not started")
        return self._orchestrator
