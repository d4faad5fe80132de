"""Telemetry bus module."""

from .kafka_client import ITelemetryBus, ProducerFactory, TelemetryBusClient

__all__ = ["ITelemetryBus", "ProducerFactory", "TelemetryBusClient"]
