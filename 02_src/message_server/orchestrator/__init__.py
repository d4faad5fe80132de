"""Orchestrator module."""

from .orchestrator import (
    IMessageOrchestrator,
    MessageOrchestrator,
    OrchestrationResult,
    OrchestrationState,
    notification_content,
    relay_file_name,
)

__all__ = [
    "IMessageOrchestrator",
    "MessageOrchestrator",
    "OrchestrationResult",
    "OrchestrationState",
    "notification_content",
    "relay_file_name",
]
