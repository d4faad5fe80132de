"""Process lifecycle: serve, drain on SIGTERM/SIGINT, force exit past the ceiling."""

import logging
import os
import signal
import threading
from typing import Callable

import uvicorn

from .api import create_fastapi_app
from .app import Application
from .logging_config import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


class _SignalAwareServer(uvicorn.Server):
    """uvicorn server that reports the first termination signal."""

    def __init__(self, config: uvicorn.Config, on_first_signal: Callable[[int], None]):
        super().__init__(config)
        self._on_first_signal = on_first_signal

    def handle_exit(self, sig, frame) -> None:
        if not self.should_exit:
            self._on_first_signal(sig)
        super().handle_exit(sig, frame)


class ServerLifecycle:
    """Runs the HTTP server for an Application and owns its shutdown."""

    def __init__(
        self,
        application: Application,
        force_exit: Callable[[int], None] = os._exit,
    ):
        self._application = application
        self._settings = application.settings
        self._force_exit = force_exit
        self._watchdog: threading.Timer | None = None

    def on_signal(self, sig: int) -> None:
        """Start the hard shutdown ceiling."""
        try:
            name = signal.Signals(sig).name
        except ValueError:
            name = str(sig)
        logger.info("Received %s; starting graceful shutdown", name)

        if self._watchdog is None:
            self._watchdog = threading.Timer(
                self._settings.shutdown_timeout, self._on_timeout
            )
            self._watchdog.daemon = True
            self._watchdog.start()

    def _on_timeout(self) -> None:
        logger.error(
            "Could not shut down gracefully within %.1fs, forcing exit",
            self._settings.shutdown_timeout,
        )
        for handler in logging.getLogger().handlers:
            handler.flush()
        self._force_exit(EXIT_ERROR)

    def cancel_watchdog(self) -> None:
        """Disarm the ceiling once shutdown has finished."""
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    def build_server(self) -> uvicorn.Server:
        """uvicorn server bound to the configured host and port."""
        config = uvicorn.Config(
            create_fastapi_app(self._application),
            host=self._settings.host,
            port=self._settings.port,
            log_config=None,
            lifespan="on",
            # In-flight requests get half the ceiling; the rest is for draining telemetry
            timeout_graceful_shutdown=max(1, int(self._settings.shutdown_timeout / 2)),
        )
        return _SignalAwareServer(config, self.on_signal)

    def run(self) -> int:
        """Serve until a termination signal. Returns the process exit code."""
        server = self.build_server()
        logger.info(
            "Message server listening on %s:%s", self._settings.host, self._settings.port
        )
        try:
            server.run()
        except Exception as e:
            logger.error("Server stopped with error: %s", e, exc_info=e)
            return EXIT_ERROR
        finally:
            self.cancel_watchdog()

        if not server.started:
            logger.error("Server failed to start")
            return EXIT_ERROR
        if not self._application.shutdown_clean:
            logger.error("Shutdown finished with errors")
            return EXIT_ERROR

        logger.info("Shutdown complete")
        return EXIT_OK
