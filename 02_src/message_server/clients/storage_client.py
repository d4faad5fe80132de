"""Upstream PDF storage client."""

import logging
from typing import Protocol
from urllib.parse import quote

import httpx

from ..errors import PDFRetrievalError
from ..logging_config import get_logger, log_with_correlation

logger = get_logger(__name__)


class IStorageClient(Protocol):
    """Fetches stored PDFs by correlation id."""

    def pdf_url(self, correlation_id: str) -> str:
        """URL the PDF for correlation_id is served from."""
        ...

    async def fetch_pdf(self, correlation_id: str) -> bytes:
        """Download the PDF. Raises PDFRetrievalError."""
        ...


class StorageClient:
    """Reads PDFs from the storage service over HTTP."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "http://localhost:5000",
        timeout: float = 10.0,
    ):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def pdf_url(self, correlation_id: str) -> str:
        """URL the PDF for correlation_id is served from."""
        segment = quote(correlation_id, safe="")
        # Dot segments would be collapsed by URL normalisation
        if segment in (".", ".."):
            segment = segment.replace(".", "%2E")
        return f"{self._base_url}/pdf-storage/{segment}"

    async def fetch_pdf(self, correlation_id: str) -> bytes:
        """Download the PDF stored under correlation_id. Every call hits the network."""
        url = self.pdf_url(correlation_id)
        log_with_correlation(
            logger, logging.INFO, f"Requesting PDF from storage: {url}", correlation_id
        )

        try:
            response = await self._client.get(url, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PDFRetrievalError(
                f"Error fetching PDF from storage service: {e}",
                upstream_status=e.response.status_code,
                context={"storageUrl": url},
            ) from e
        except httpx.TimeoutException as e:
            raise PDFRetrievalError(
                f"Timed out fetching PDF from storage service after {self._timeout}s",
                context={"storageUrl": url},
            ) from e
        except httpx.HTTPError as e:
            raise PDFRetrievalError(
                f"Error fetching PDF from storage service: {e}",
                context={"storageUrl": url},
            ) from e

        content = response.content
        log_with_correlation(
            logger,
            logging.INFO,
            f"PDF fetched from storage - Size: {len(content)} bytes",
            correlation_id,
        )
        return content
