"""Kafka-backed telemetry bus client with graceful degradation."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from aiokafka import AIOKafkaProducer

from ..config import SERVICE_NAME, KafkaSettings
from ..errors import BusDeliveryError
from ..logging_config import get_logger, log_with_correlation
from ..models import BusConnectionState, TelemetryRecord

logger = get_logger(__name__)


ProducerFactory = Callable[..., Any]


class ITelemetryBus(Protocol):
    """Best-effort sink for telemetry records."""

    async def initialize(self) -> None:
        """Connect to the broker. Never raises."""
        ...

    async def send(
        self, topic: str, record: TelemetryRecord, correlation_id: str | None = None
    ) -> bool:
        """Publish a record. Returns False instead of raising."""
        ...

    async def shutdown(self) -> None:
        """Close the connection. Never raises."""
        ...


class TelemetryBusClient:
    """Owns the process-wide Kafka producer."""

    def __init__(
        self,
        settings: KafkaSettings,
        producer_factory: ProducerFactory = AIOKafkaProducer,
        service: str = SERVICE_NAME,
    ):
        self._settings = settings
        self._producer_factory = producer_factory
        self._service = service
        self._producer: Any = None
        self._state = BusConnectionState.UNINITIALIZED

    @property
    def state(self) -> BusConnectionState:
        """Current connection state."""
        return self._state

    async def initialize(self) -> None:
        """Connect to the configured brokers within the connect timeout."""
        brokers = self._settings.bootstrap_servers
        try:
            self._producer = self._producer_factory(
                bootstrap_servers=",".join(brokers),
                client_id=self._settings.client_id,
            )
            await asyncio.wait_for(
                self._producer.start(), timeout=self._settings.connect_timeout
            )
        except Exception as e:
            self._state = BusConnectionState.DISCONNECTED
            logger.warning(
                "Kafka unavailable at %s (%s); continuing with local logs only",
                brokers,
                e.__class__.__name__,
            )
            await self._discard_producer()
            return

        self._state = BusConnectionState.CONNECTED
        logger.info("Kafka producer connected to %s", brokers)

    async def send(
        self, topic: str, record: TelemetryRecord, correlation_id: str | None = None
    ) -> bool:
        """Publish a record keyed by correlation id."""
        if self._state is not BusConnectionState.CONNECTED:
            log_with_correlation(
                logger,
                logging.WARNING,
                f"Kafka not connected; message not sent to topic {topic}",
                correlation_id,
            )
            return False

        value = {
            **record.to_payload(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "correlationId": correlation_id,
            "service": self._service,
        }
        headers = [
            ("correlation-id", (correlation_id or "").encode("utf-8")),
            ("service", self._service.encode("utf-8")),
        ]

        try:
            await self._producer.send_and_wait(
                topic,
                value=json.dumps(value, default=str).encode("utf-8"),
                key=correlation_id.encode("utf-8") if correlation_id else None,
                headers=headers,
            )
        except Exception as e:
            error = BusDeliveryError(
                f"Error sending message to Kafka topic {topic}: {e}",
                context={"topic": topic},
            )
            log_with_correlation(
                logger,
                logging.ERROR,
                error.message,
                correlation_id,
                exc_info=e,
                errorType=error.error_type,
            )
            return False

        logger.debug("Message sent to Kafka topic %s", topic)
        return True

    async def shutdown(self) -> None:
        """Stop the producer if connected."""
        if self._state is not BusConnectionState.CONNECTED:
            return
        self._state = BusConnectionState.DISCONNECTED
        try:
            await self._producer.stop()
            logger.info("Kafka producer disconnected")
        except Exception as e:
            logger.error("Error disconnecting Kafka producer: %s", e)
        finally:
            self._producer = None

    async def _discard_producer(self) -> None:
        """Release a producer that never finished connecting."""
        producer, self._producer = self._producer, None
        if producer is None:
            return
        try:
            await asyncio.wait_for(
                producer.stop(), timeout=self._settings.connect_timeout
            )
        except Exception as e:
            logger.debug("Ignoring error while discarding Kafka producer: %s", e)
