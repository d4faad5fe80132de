"""Structured Error/Event/Request loggers.

Each logger turns a loosely shaped mapping into a TelemetryRecord, writes it to
the local log sink, and forwards it to the telemetry bus. Callers on the
request path use the ``*_nowait`` variants so the bus send runs in the
background; the local log line is always written before they return.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..bus import ITelemetryBus
from ..config import KafkaSettings
from ..logging_config import get_logger, log_with_correlation
from ..models import ErrorRecord, EventRecord, RequestRecord, TelemetryRecord
from .dispatcher import TelemetryDispatcher

logger = get_logger(__name__)


# Accepted spellings per record field, first match wins
ERROR_TYPE_KEYS = ("errorType", "error_type")
ERROR_MESSAGE_KEYS = ("message", "errorMessage", "error_message")
STACK_KEYS = ("stack", "stackTrace", "stack_trace")
CONTEXT_KEYS = ("context",)
EVENT_TYPE_KEYS = ("eventType", "event_type")
DESCRIPTION_KEYS = ("description", "eventDescription", "event_description")
METADATA_KEYS = ("metadata",)
ENDPOINT_KEYS = ("endpoint", "path")
METHOD_KEYS = ("method",)
STATUS_KEYS = ("statusCode", "status_code")
DURATION_KEYS = ("duration", "durationMs", "duration_ms")
REQUEST_BODY_KEYS = ("requestBody", "request_body", "body")
RESPONSE_BODY_KEYS = ("responseBody", "response_body")
CLIENT_IP_KEYS = ("clientIp", "client_ip")
USER_AGENT_KEYS = ("userAgent", "user_agent")


def _pick(data: Mapping[str, Any], keys: tuple[str, ...], default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


class _StructuredLogger:
    """Shared plumbing: local sink write plus best-effort bus forward."""

    level = logging.INFO

    def __init__(
        self,
        bus: ITelemetryBus,
        topic: str,
        dispatcher: TelemetryDispatcher | None = None,
    ):
        self._bus = bus
        self.topic = topic
        self._dispatcher = dispatcher or TelemetryDispatcher()

    def _write_local(self, record: TelemetryRecord) -> None:
        # Handler failures are reported by logging itself, never raised here
        log_with_correlation(
            logger,
            self.level,
            record.summary(),
            record.correlation_id,
            **self._local_context(record),
        )

    def _local_context(self, record: TelemetryRecord) -> dict[str, Any]:
        return {}

    async def _publish(self, record: TelemetryRecord) -> bool:
        try:
            return await self._bus.send(self.topic, record, record.correlation_id)
        except Exception as e:
            log_with_correlation(
                logger,
                logging.ERROR,
                f"Telemetry bus send to {self.topic} raised: {e}",
                record.correlation_id,
            )
            return False

    async def _emit(self, record: TelemetryRecord) -> bool:
        self._write_local(record)
        return await self._publish(record)

    def _emit_nowait(self, record: TelemetryRecord) -> TelemetryRecord:
        self._write_local(record)
        self._dispatcher.spawn(self._publish(record))
        return record


class ErrorLogger(_StructuredLogger):
    """Reports failures to the error topic."""

    level = logging.ERROR

    def build(
        self, error_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> ErrorRecord:
        """Normalise error_data into an ErrorRecord."""
        return ErrorRecord(
            correlation_id=correlation_id,
            error_type=_pick(error_data, ERROR_TYPE_KEYS, "UnknownError"),
            message=_pick(error_data, ERROR_MESSAGE_KEYS),
            stack_trace=_pick(error_data, STACK_KEYS),
            context=dict(_pick(error_data, CONTEXT_KEYS, {})),
            endpoint=_pick(error_data, ENDPOINT_KEYS),
            method=_pick(error_data, METHOD_KEYS),
        )

    def _local_context(self, record: ErrorRecord) -> dict[str, Any]:
        return {
            "errorType": record.error_type,
            "endpoint": record.endpoint,
            "stack": record.stack_trace,
        }

    async def log_error(
        self, error_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> bool:
        """Log locally and publish; resolves once the send attempt is over."""
        return await self._emit(self.build(error_data, correlation_id))

    def log_error_nowait(
        self, error_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> ErrorRecord:
        """Log locally now, publish in the background."""
        return self._emit_nowait(self.build(error_data, correlation_id))


class EventLogger(_StructuredLogger):
    """Reports business milestones to the event topic."""

    def build(
        self, event_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> EventRecord:
        """Normalise event_data into an EventRecord."""
        return EventRecord(
            correlation_id=correlation_id,
            event_type=_pick(event_data, EVENT_TYPE_KEYS, "UnknownEvent"),
            description=_pick(event_data, DESCRIPTION_KEYS),
            metadata=dict(_pick(event_data, METADATA_KEYS, {})),
            endpoint=_pick(event_data, ENDPOINT_KEYS),
            method=_pick(event_data, METHOD_KEYS),
        )

    def _local_context(self, record: EventRecord) -> dict[str, Any]:
        return {"eventType": record.event_type, "endpoint": record.endpoint}

    async def log_event(
        self, event_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> bool:
        """Log locally and publish; resolves once the send attempt is over."""
        return await self._emit(self.build(event_data, correlation_id))

    def log_event_nowait(
        self, event_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> EventRecord:
        """Log locally now, publish in the background."""
        return self._emit_nowait(self.build(event_data, correlation_id))


class RequestLogger(_StructuredLogger):
    """Reports completed HTTP requests to the request topic."""

    def build(
        self, request_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> RequestRecord:
        """Normalise request_data into a RequestRecord."""
        return RequestRecord(
            correlation_id=correlation_id,
            method=_pick(request_data, METHOD_KEYS),
            endpoint=_pick(request_data, ENDPOINT_KEYS),
            status_code=_pick(request_data, STATUS_KEYS),
            duration=_pick(request_data, DURATION_KEYS),
            request_body=_pick(request_data, REQUEST_BODY_KEYS, {}),
            response_body=_pick(request_data, RESPONSE_BODY_KEYS, {}),
            client_ip=_pick(request_data, CLIENT_IP_KEYS),
            user_agent=_pick(request_data, USER_AGENT_KEYS),
        )

    def _local_context(self, record: RequestRecord) -> dict[str, Any]:
        return {
            "method": record.method,
            "endpoint": record.endpoint,
            "statusCode": record.status_code,
        }

    async def log_request(
        self, request_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> bool:
        """Log locally and publish; resolves once the send attempt is over."""
        return await self._emit(self.build(request_data, correlation_id))

    def log_request_nowait(
        self, request_data: Mapping[str, Any], correlation_id: str | None = None
    ) -> RequestRecord:
        """Log locally now, publish in the background."""
        return self._emit_nowait(self.build(request_data, correlation_id))


@dataclass
class TelemetryLoggers:
    """The three structured loggers sharing one bus and one dispatcher."""

    errors: ErrorLogger
    events: EventLogger
    requests: RequestLogger
    dispatcher: TelemetryDispatcher

    @classmethod
    def create(cls, bus: ITelemetryBus, settings: KafkaSettings) -> "TelemetryLoggers":
        dispatcher = TelemetryDispatcher()
        return cls(
            errors=ErrorLogger(bus, settings.error_topic, dispatcher),
            events=EventLogger(bus, settings.event_topic, dispatcher),
            requests=RequestLogger(bus, settings.request_topic, dispatcher),
            dispatcher=dispatcher,
        )
