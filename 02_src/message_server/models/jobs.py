"""Job-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _text(data: dict[str, Any], key: str) -> str | None:
    # Empty strings count as absent
    value = data.get(key)
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


@dataclass
class JobRequest:
    """A single inbound unit of work: fetch one PDF and relay it."""

    correlation_id: str
    service: str = "Message Server"
    endpoint: str = ""
    email_address: str | None = None
    message_recipient: str | None = None
    subject: str | None = None
    message_body: str | None = None
    platform_type: str | None = None
    pdf_file_name: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Tracked by the orchestrator, never by the caller
    success: bool | None = None
    execution_time_ms: float = 0.0
    server_host: str = ""

    @classmethod
    def from_payload(
        cls,
        data: dict[str, Any],
        service: str = "Message Server",
        endpoint: str = "",
    ) -> "JobRequest":
        """Build a JobRequest from the untrusted JSON body."""
        return cls(
            correlation_id=_text(data, "CorrelationId") or "",
            service=service,
            endpoint=endpoint,
            email_address=_text(data, "EmailAddress"),
            message_recipient=_text(data, "MessageRecipient"),
            subject=_text(data, "Subject"),
            message_body=_text(data, "MessageBody"),
            platform_type=_text(data, "PlatformType"),
            pdf_file_name=_text(data, "PdfFileName"),
        )

    def missing_fields(self) -> list[str]:
        """Names of required body fields that are absent."""
        missing = []
        if not self.correlation_id:
            missing.append("CorrelationId")
        if not self.pdf_file_name:
            missing.append("PdfFileName")
        return missing

    def to_log_object(self) -> dict[str, Any]:
        """Snapshot used as error context."""
        return {
            "correlationId": self.correlation_id,
            "service": self.service,
            "endpoint": self.endpoint,
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "executionTimeMs": self.execution_time_ms,
            "platformType": self.platform_type,
            "pdfFileName": self.pdf_file_name,
        }
