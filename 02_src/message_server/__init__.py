"""Message server core module."""

from .app import Application, IApplication
from .bus import ITelemetryBus, TelemetryBusClient
from .clients import IStorageClient, IWebhookClient, StorageClient, WebhookClient
from .config import KafkaSettings, Settings
from .errors import (
    BusDeliveryError,
    ConfigurationError,
    DiscordSendError,
    MessageServerError,
    PDFRetrievalError,
    ValidationError,
)
from .models import (
    BusConnectionState,
    ErrorRecord,
    EventRecord,
    JobRequest,
    RequestRecord,
    TelemetryRecord,
)
from .orchestrator import IMessageOrchestrator, MessageOrchestrator, OrchestrationState
from .telemetry import (
    ErrorLogger,
    EventLogger,
    RequestLogger,
    TelemetryDispatcher,
    TelemetryLoggers,
)

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    "KafkaSettings",
    # Models
    "JobRequest",
    "TelemetryRecord",
    "ErrorRecord",
    "EventRecord",
    "RequestRecord",
    "BusConnectionState",
    # Errors
    "MessageServerError",
    "ValidationError",
    "ConfigurationError",
    "PDFRetrievalError",
    "DiscordSendError",
    "BusDeliveryError",
    # Components
    "ITelemetryBus",
    "TelemetryBusClient",
    "ErrorLogger",
    "EventLogger",
    "RequestLogger",
    "TelemetryDispatcher",
    "TelemetryLoggers",
    "IStorageClient",
    "StorageClient",
    "IWebhookClient",
    "WebhookClient",
    "IMessageOrchestrator",
    "MessageOrchestrator",
    "OrchestrationState",
]
