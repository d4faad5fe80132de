"""Structured telemetry module."""

from .dispatcher import TelemetryDispatcher
from .loggers import ErrorLogger, EventLogger, RequestLogger, TelemetryLoggers

__all__ = [
    "ErrorLogger",
    "EventLogger",
    "RequestLogger",
    "TelemetryDispatcher",
    "TelemetryLoggers",
]
