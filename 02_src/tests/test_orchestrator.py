"""Tests for MessageOrchestrator."""

from unittest.mock import AsyncMock, Mock

import pytest

from message_server.errors import DiscordSendError, PDFRetrievalError
from message_server.models import ErrorRecord, JobRequest
from message_server.orchestrator import (
    MessageOrchestrator,
    OrchestrationState,
    notification_content,
    relay_file_name,
)
from message_server.telemetry import TelemetryLoggers

ENDPOINT = "/api/pdf/process-message"
VALID_BODY = {
    "CorrelationId": "abc-1",
    "PdfFileName": "report.pdf",
    "PlatformType": "web",
    "MessageBody": "Your report",
}


@pytest.fixture
def storage():
    client = Mock()
    client.fetch_pdf = AsyncMock(return_value=b"x" * 2048)
    client.pdf_url = Mock(side_effect=lambda cid: f"http://storage.test/pdf-storage/{cid}")
    return client


@pytest.fixture
def webhook():
    client = Mock()
    client.send_pdf = AsyncMock(return_value=204)
    return client


@pytest.fixture
def telemetry(fake_bus, kafka_settings):
    return TelemetryLoggers.create(fake_bus, kafka_settings)


@pytest.fixture
def orchestrator(storage, webhook, telemetry):
    return MessageOrchestrator(storage=storage, webhook=webhook, telemetry=telemetry)


def event_types(fake_bus):
    return [r.event_type for r in fake_bus.records("message-server-events")]


class TestValidation:
    """Tests for RECEIVED -> VALIDATED."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{}, {"CorrelationId": "abc-1"}, {"PdfFileName": "report.pdf"}, None, ["x"]],
    )
    async def test_missing_fields_rejected(
        self, orchestrator, storage, webhook, telemetry, fake_bus, body
    ):
        """Test that invalid bodies get 400 and no upstream calls."""
        result = await orchestrator.process_message(body, "req-1", ENDPOINT, "POST")
        await telemetry.dispatcher.drain()

        assert result.status_code == 400
        assert result.body == {"message": "Missing CorrelationId or PdfFileName."}
        assert result.reached is OrchestrationState.RECEIVED
        assert result.job.success is False
        storage.fetch_pdf.assert_not_called()
        webhook.send_pdf.assert_not_called()

        errors = fake_bus.records("message-server-errors")
        assert len(errors) == 1
        assert errors[0].error_type == "ValidationError"
        assert errors[0].endpoint == ENDPOINT
        assert errors[0].method == "POST"


class TestSuccess:
    """Tests for the full path."""

    @pytest.mark.asyncio
    async def test_success_response(self, orchestrator, telemetry, fake_bus):
        """Test the 200 body and emitted events."""
        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 200
        assert result.success is True
        assert result.reached is OrchestrationState.RELAYED
        assert result.body["message"] == "Job abc-1 successfully fetched PDF buffer."
        assert result.body["pdfFileSize"] == "2048 bytes"
        assert result.body["platformType"] == "web"
        assert result.body["discordStatus"] == 204
        assert result.body["executionTimeMs"] >= 0
        assert result.body["executionTimeMs"] == round(result.body["executionTimeMs"], 2)

        assert event_types(fake_bus) == [
            "PDF_FETCHED_FROM_STORAGE",
            "PDF_RECEIVED",
            "PDF_SENT_TO_DISCORD",
            "MESSAGE_PROCESSED_SUCCESS",
        ]
        assert fake_bus.records("message-server-errors") == []
        assert all(cid == "req-1" for _, _, cid in fake_bus.sent)

    @pytest.mark.asyncio
    async def test_relay_arguments(self, orchestrator, webhook, storage):
        """Test the renamed file and composed message handed to the webhook."""
        await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)

        storage.fetch_pdf.assert_awaited_once_with("abc-1")
        file_name, pdf, content, correlation_id = webhook.send_pdf.call_args.args
        assert file_name == "report-abc-1.pdf"
        assert len(pdf) == 2048
        assert "ID abc-1" in content
        assert "Platform web" in content
        assert content.endswith("Your report")
        assert correlation_id == "req-1"

    @pytest.mark.asyncio
    async def test_success_event_metadata(self, orchestrator, telemetry, fake_bus):
        """Test the final event carries the outcome."""
        await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        final = fake_bus.records("message-server-events")[-1]
        assert final.metadata["discordStatus"] == 204
        assert final.metadata["pdfFileSize"] == 2048
        assert final.metadata["platformType"] == "web"
        assert final.metadata["executionTimeMs"] >= 0


class TestFailures:
    """Tests for short-circuit failure paths."""

    @pytest.mark.asyncio
    async def test_fetch_failure(self, orchestrator, storage, webhook, telemetry, fake_bus):
        """Test that a fetch failure skips the relay."""
        storage.fetch_pdf.side_effect = PDFRetrievalError(
            "Error fetching PDF from storage service: 404", upstream_status=404
        )

        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 500
        assert result.body["message"] == "Error processing message"
        assert "404" in result.body["error"]
        assert result.body["correlationId"] == "abc-1"
        assert result.reached is OrchestrationState.VALIDATED
        webhook.send_pdf.assert_not_called()

        errors = fake_bus.records("message-server-errors")
        assert len(errors) == 1
        assert errors[0].error_type == "PDFRetrievalError"
        assert errors[0].context["statusCode"] == 404
        assert "fileSize" not in errors[0].context
        assert errors[0].stack_trace
        assert event_types(fake_bus) == []

    @pytest.mark.asyncio
    async def test_missing_webhook_is_configuration_error(
        self, storage, telemetry, fake_bus
    ):
        """Test that an unconfigured webhook fails without an outbound call."""
        orchestrator = MessageOrchestrator(storage=storage, webhook=None, telemetry=telemetry)

        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 500
        assert "DISCORD_WEBHOOK_URL" in result.body["error"]
        assert result.reached is OrchestrationState.ARTIFACT_FETCHED

        errors = fake_bus.records("message-server-errors")
        assert [e.error_type for e in errors] == ["ConfigurationError"]

    @pytest.mark.asyncio
    async def test_relay_failure(self, orchestrator, webhook, telemetry, fake_bus):
        """Test that a relay failure reports one DiscordSendError."""
        webhook.send_pdf.side_effect = DiscordSendError("rejected", upstream_status=400)

        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 500
        assert result.body["error"] == "rejected"
        assert result.job.success is False
        assert result.job.execution_time_ms >= 0

        errors = fake_bus.records("message-server-errors")
        assert len(errors) == 1
        assert isinstance(errors[0], ErrorRecord)
        assert errors[0].error_type == "DiscordSendError"
        assert errors[0].context["statusCode"] == 400
        assert errors[0].context["fileSize"] == 2048
        assert errors[0].context["platformType"] == "web"
        assert errors[0].context["requestData"]["correlationId"] == "abc-1"
        assert "MESSAGE_PROCESSED_SUCCESS" not in event_types(fake_bus)

    @pytest.mark.asyncio
    async def test_unexpected_error(self, orchestrator, storage, telemetry, fake_bus):
        """Test that unknown exceptions still yield one 500 and one error record."""
        storage.fetch_pdf.side_effect = KeyError("surprise")

        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 500
        assert result.body["correlationId"] == "abc-1"
        errors = fake_bus.records("message-server-errors")
        assert [e.error_type for e in errors] == ["KeyError"]

    @pytest.mark.asyncio
    async def test_bus_down_does_not_change_outcome(
        self, orchestrator, telemetry, fake_bus
    ):
        """Test that a disconnected bus leaves the response unchanged."""
        fake_bus.connected = False

        result = await orchestrator.process_message(VALID_BODY, "req-1", ENDPOINT)
        await telemetry.dispatcher.drain()

        assert result.status_code == 200
        assert fake_bus.sent == []


class TestHelpers:
    """Tests for naming and message helpers."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("report.pdf", "report-abc.pdf"),
            ("report.final.PDF", "report-abc.PDF"),
            ("report", "report-abc.pdf"),
            (".pdf", "document-abc.pdf"),
        ],
    )
    def test_relay_file_name(self, name, expected):
        """Test the relayed file name."""
        assert relay_file_name(name, "abc") == expected

    def test_notification_content_defaults(self):
        """Test the message when optional fields are missing."""
        job = JobRequest.from_payload({"CorrelationId": "abc", "PdfFileName": "a.pdf"})

        content = notification_content(job)

        assert content.startswith("**DELIVERY NOTIFICATION:** ID abc | Platform unknown")
        assert content.endswith("\n\n")
