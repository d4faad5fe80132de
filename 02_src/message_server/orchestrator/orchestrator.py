"""MessageOrchestrator: fetch a PDF from storage and relay it to the webhook."""

import logging
import time
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from ..clients import IStorageClient, IWebhookClient
from ..errors import ConfigurationError, MessageServerError, ValidationError
from ..logging_config import get_logger, log_with_correlation
from ..models import JobRequest
from ..telemetry import TelemetryLoggers

logger = get_logger(__name__)

VALIDATION_MESSAGE = "Missing CorrelationId or PdfFileName."
FAILURE_MESSAGE = "Error processing message"


class OrchestrationState(str, Enum):
    """Steps of one job, in order."""

    RECEIVED = "received"
    VALIDATED = "validated"
    ARTIFACT_FETCHED = "artifact_fetched"
    RELAYED = "relayed"
    COMPLETED = "completed"


@dataclass
class OrchestrationResult:
    """Outcome handed back to the HTTP layer."""

    status_code: int
    body: dict[str, Any]
    job: JobRequest
    reached: OrchestrationState  # last step completed before the job ended

    @property
    def success(self) -> bool:
        return bool(self.job.success)


class IMessageOrchestrator(Protocol):
    """Sequences PDF retrieval and relay for one request."""

    async def process_message(
        self,
        body: Any,
        correlation_id: str,
        endpoint: str = "",
        method: str = "POST",
    ) -> OrchestrationResult:
        """Run the job described by body. Never raises."""
        ...


def relay_file_name(pdf_file_name: str, correlation_id: str) -> str:
    """Name of the relayed file: primary segment, correlation id, original extension."""
    primary = pdf_file_name.split(".")[0] or "document"
    extension = pdf_file_name.rsplit(".", 1)[1] if "." in pdf_file_name else ""
    return f"{primary}-{correlation_id}.{extension or 'pdf'}"


def notification_content(job: JobRequest) -> str:
    """Message text posted alongside the PDF."""
    return (
        f"**DELIVERY NOTIFICATION:** ID {job.correlation_id} "
        f"| Platform {job.platform_type or 'unknown'}\n\n{job.message_body or ''}"
    )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class MessageOrchestrator:
    """Runs RECEIVED -> VALIDATED -> ARTIFACT_FETCHED -> RELAYED -> COMPLETED."""

    def __init__(
        self,
        storage: IStorageClient,
        webhook: IWebhookClient | None,
        telemetry: TelemetryLoggers,
        server_host: str = "",
    ):
        self._storage = storage
        self._webhook = webhook
        self._telemetry = telemetry
        self._server_host = server_host

    async def process_message(
        self,
        body: Any,
        correlation_id: str,
        endpoint: str = "",
        method: str = "POST",
    ) -> OrchestrationResult:
        """Run the job described by body and build the HTTP outcome."""
        payload = body if isinstance(body, dict) else {}
        log_with_correlation(
            logger, logging.INFO, f"Processing request on {endpoint}", correlation_id
        )

        job = JobRequest.from_payload(payload, endpoint=endpoint)
        job.server_host = self._server_host
        reached = OrchestrationState.RECEIVED

        missing = job.missing_fields()
        if missing:
            job.success = False
            self._telemetry.errors.log_error_nowait(
                {
                    "errorType": ValidationError.error_type,
                    "message": f"Missing required fields: {', '.join(missing)}",
                    "endpoint": endpoint,
                    "method": method,
                    "context": {"body": payload, "missingFields": missing},
                },
                correlation_id,
            )
            return OrchestrationResult(
                status_code=ValidationError.status_code,
                body={"message": VALIDATION_MESSAGE},
                job=job,
                reached=reached,
            )

        reached = OrchestrationState.VALIDATED
        start = time.perf_counter()
        file_size = None

        try:
            pdf = await self._fetch(job, correlation_id, endpoint, method)
            reached = OrchestrationState.ARTIFACT_FETCHED
            file_size = len(pdf)

            discord_status = await self._relay(pdf, job, correlation_id)
            reached = OrchestrationState.RELAYED
        except Exception as e:
            job.execution_time_ms = _elapsed_ms(start)
            job.success = False
            self._report_failure(e, job, correlation_id, endpoint, method, file_size)
            return OrchestrationResult(
                status_code=e.status_code if isinstance(e, MessageServerError) else 500,
                body={
                    "message": FAILURE_MESSAGE,
                    "error": e.message if isinstance(e, MessageServerError) else str(e),
                    "correlationId": job.correlation_id,
                },
                job=job,
                reached=reached,
            )

        job.execution_time_ms = _elapsed_ms(start)
        job.success = True

        self._telemetry.events.log_event_nowait(
            {
                "eventType": "MESSAGE_PROCESSED_SUCCESS",
                "description": (
                    f"Request processed successfully in {job.execution_time_ms:.2f}ms"
                ),
                "endpoint": endpoint,
                "method": method,
                "metadata": {
                    "correlationId": job.correlation_id,
                    "platformType": job.platform_type,
                    "executionTimeMs": job.execution_time_ms,
                    "discordStatus": discord_status,
                    "pdfFileSize": len(pdf),
                },
            },
            correlation_id,
        )

        return OrchestrationResult(
            status_code=200,
            body={
                "message": f"Job {job.correlation_id} successfully fetched PDF buffer.",
                "pdfFileSize": f"{len(pdf)} bytes",
                "platformType": job.platform_type,
                "discordStatus": discord_status,
                "executionTimeMs": round(job.execution_time_ms, 2),
            },
            job=job,
            reached=reached,
        )

    async def _fetch(
        self, job: JobRequest, correlation_id: str, endpoint: str, method: str
    ) -> bytes:
        pdf = await self._storage.fetch_pdf(job.correlation_id)

        self._telemetry.events.log_event_nowait(
            {
                "eventType": "PDF_FETCHED_FROM_STORAGE",
                "description": (
                    f"PDF retrieved from storage service - Size: {len(pdf)} bytes"
                ),
                "metadata": {
                    "correlationId": job.correlation_id,
                    "fileSize": len(pdf),
                    "storageUrl": self._storage.pdf_url(job.correlation_id),
                },
            },
            correlation_id,
        )
        self._telemetry.events.log_event_nowait(
            {
                "eventType": "PDF_RECEIVED",
                "description": (
                    f"PDF received - Name: {job.pdf_file_name}, Size: {len(pdf)} bytes"
                ),
                "endpoint": endpoint,
                "method": method,
                "metadata": {
                    "correlationId": job.correlation_id,
                    "fileName": job.pdf_file_name,
                    "fileSize": len(pdf),
                },
            },
            correlation_id,
        )
        return pdf

    async def _relay(self, pdf: bytes, job: JobRequest, correlation_id: str) -> int:
        if self._webhook is None:
            raise ConfigurationError(
                "DISCORD_WEBHOOK_URL is not configured; cannot relay the PDF."
            )

        file_name = relay_file_name(job.pdf_file_name, job.correlation_id)
        status = await self._webhook.send_pdf(
            file_name, pdf, notification_content(job), correlation_id
        )

        self._telemetry.events.log_event_nowait(
            {
                "eventType": "PDF_SENT_TO_DISCORD",
                "description": f"PDF sent to Discord - File: {file_name}",
                "metadata": {
                    "correlationId": job.correlation_id,
                    "fileName": file_name,
                    "platformType": job.platform_type,
                    "discordStatus": status,
                    "fileSize": len(pdf),
                },
            },
            correlation_id,
        )
        return status

    def _report_failure(
        self,
        error: Exception,
        job: JobRequest,
        correlation_id: str,
        endpoint: str,
        method: str,
        file_size: int | None = None,
    ) -> None:
        """Emit the single ErrorRecord for a failed job."""
        if isinstance(error, MessageServerError):
            error_type = error.error_type
            message = error.message
            context = dict(error.context)
        else:
            error_type = error.__class__.__name__ or "UnknownError"
            message = str(error)
            context = {}

        upstream_status = getattr(error, "upstream_status", None)
        if upstream_status is not None:
            context["statusCode"] = upstream_status
        if file_size is not None:
            context["fileSize"] = file_size
        context.update(
            {
                "correlationId": job.correlation_id,
                "fileName": job.pdf_file_name,
                "platformType": job.platform_type,
                "executionTimeMs": job.execution_time_ms,
                "requestData": job.to_log_object(),
            }
        )

        self._telemetry.errors.log_error_nowait(
            {
                "errorType": error_type,
                "message": message,
                "stackTrace": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
                "endpoint": endpoint,
                "method": method,
                "context": context,
            },
            correlation_id,
        )
