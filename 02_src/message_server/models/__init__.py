"""Core data models for the message server."""

from .jobs import JobRequest
from .telemetry import (
    BusConnectionState,
    ErrorRecord,
    EventRecord,
    RequestRecord,
    TelemetryRecord,
)

__all__ = [
    # Jobs
    "JobRequest",
    # Telemetry
    "TelemetryRecord",
    "ErrorRecord",
    "EventRecord",
    "RequestRecord",
    "BusConnectionState",
]
