"""Error taxonomy for the message server."""

from typing import Any


class MessageServerError(Exception):
    """Base class for errors that end a request with a JSON error response."""

    error_type = "UnknownError"
    status_code = 500

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(MessageServerError):
    """Inbound body is missing required fields."""

    error_type = "ValidationError"
    status_code = 400


class ConfigurationError(MessageServerError):
    """Required deployment configuration is missing."""

    error_type = "ConfigurationError"


class PDFRetrievalError(MessageServerError):
    """Upstream storage did not return the artifact."""

    error_type = "PDFRetrievalError"

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.upstream_status = upstream_status


class DiscordSendError(MessageServerError):
    """Outbound webhook rejected or never received the artifact."""

    error_type = "DiscordSendError"

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.upstream_status = upstream_status


class BusDeliveryError(MessageServerError):
    """Telemetry publish failed. Logged locally, never surfaced to callers."""

    error_type = "BusDeliveryError"
