"""Outbound Discord webhook client."""

import json
import logging
from typing import Protocol

import httpx

from ..errors import DiscordSendError
from ..logging_config import get_logger, log_with_correlation

logger = get_logger(__name__)

NOTIFIER_USERNAME = "PDF Notifier (Microservice)"


class IWebhookClient(Protocol):
    """Relays PDFs to the notification channel."""

    async def send_pdf(
        self,
        file_name: str,
        pdf: bytes,
        content: str,
        correlation_id: str | None = None,
    ) -> int:
        """Post the PDF and return the webhook's status code. Raises DiscordSendError."""
        ...


class WebhookClient:
    """Posts PDFs to a Discord webhook as multipart uploads."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        webhook_url: str,
        timeout: float = 10.0,
        username: str = NOTIFIER_USERNAME,
    ):
        self._client = client
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._username = username

    async def send_pdf(
        self,
        file_name: str,
        pdf: bytes,
        content: str,
        correlation_id: str | None = None,
    ) -> int:
        """Post the PDF and return the webhook's status code."""
        log_with_correlation(
            logger,
            logging.INFO,
            f"Sending PDF to Discord webhook - File: {file_name}",
            correlation_id,
        )

        files = {"file": (file_name, pdf, "application/pdf")}
        data = {
            "payload_json": json.dumps(
                {"content": content, "username": self._username}
            )
        }

        try:
            response = await self._client.post(
                self._webhook_url, files=files, data=data, timeout=self._timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DiscordSendError(
                f"Error sending PDF to Discord: {e}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise DiscordSendError(
                f"Timed out sending PDF to Discord after {self._timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise DiscordSendError(f"Error sending PDF to Discord: {e}") from e

        log_with_correlation(
            logger,
            logging.INFO,
            f"PDF sent to Discord - Status: {response.status_code}",
            correlation_id,
        )
        return response.status_code
