"""Telemetry data models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from ..config import SERVICE_NAME


class BusConnectionState(str, Enum):
    """Connection state of the telemetry bus client."""

    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True)
class TelemetryRecord(ABC):
    """Fields shared by every record sent to the local sink and the bus."""

    level: str = "INFO"
    correlation_id: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    service: str = SERVICE_NAME

    @abstractmethod
    def summary(self) -> str:
        """One-line human description for the local log."""

    @abstractmethod
    def _body(self) -> dict[str, Any]:
        """Record-specific wire fields."""

    def to_payload(self) -> dict[str, Any]:
        """Wire document, without the dispatch-time fields added by the bus client."""
        return {
            "level": self.level,
            **self._body(),
            "originatedAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True, kw_only=True)
class ErrorRecord(TelemetryRecord):
    """A failure worth reporting to operators."""

    level: str = "ERROR"
    error_type: str = "UnknownError"
    message: str | None = None
    stack_trace: str | None = None
    context: Mapping[str, Any] = field(default_factory=dict)
    endpoint: str | None = None
    method: str | None = None

    def summary(self) -> str:
        return self.message or self.error_type

    def _body(self) -> dict[str, Any]:
        return {
            "errorType": self.error_type,
            "errorMessage": self.message,
            "stackTrace": self.stack_trace,
            "context": dict(self.context),
            "endpoint": self.endpoint,
            "method": self.method,
        }


@dataclass(frozen=True, kw_only=True)
class EventRecord(TelemetryRecord):
    """A business milestone inside one request."""

    event_type: str
    description: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    endpoint: str | None = None
    method: str | None = None

    def summary(self) -> str:
        return self.description or self.event_type

    def _body(self) -> dict[str, Any]:
        return {
            "eventType": self.event_type,
            "eventDescription": self.description,
            "metadata": dict(self.metadata),
            "endpoint": self.endpoint,
            "method": self.method,
        }


@dataclass(frozen=True, kw_only=True)
class RequestRecord(TelemetryRecord):
    """One completed inbound HTTP request."""

    method: str | None = None
    endpoint: str | None = None
    status_code: int | None = None
    duration: float | None = None  # milliseconds
    request_body: Any = field(default_factory=dict)
    response_body: Any = field(default_factory=dict)
    client_ip: str | None = None
    user_agent: str | None = None

    def summary(self) -> str:
        return f"{self.method} {self.endpoint} - {self.status_code} - {self.duration}ms"

    def _body(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "endpoint": self.endpoint,
            "statusCode": self.status_code,
            "duration": self.duration,
            "requestBody": self.request_body,
            "responseBody": self.response_body,
            "clientIp": self.client_ip,
            "userAgent": self.user_agent,
        }
