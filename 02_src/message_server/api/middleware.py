"""Correlation id and request timing middleware."""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import SERVICE_NAME
from ..context import (
    CORRELATION_HEADER,
    reset_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from ..logging_config import get_logger, log_with_correlation
from ..telemetry import RequestLogger

logger = get_logger(__name__)

BODY_SNAPSHOT_LIMIT = 4096


async def _body_snapshot(request: Request) -> Any:
    """Request body as parsed JSON, or truncated text when it is not JSON."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return raw[:BODY_SNAPSHOT_LIMIT].decode("utf-8", errors="replace")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Assigns the correlation id, logs start/completion, reports the request."""

    def __init__(self, app, request_logger: RequestLogger):
        super().__init__(app)
        self._request_logger = request_logger

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        correlation_id, supplied = resolve_correlation_id(request.headers)
        request.state.correlation_id = correlation_id
        token = set_correlation_id(correlation_id)

        try:
            origin = "client" if supplied else "server"
            hostname = request.url.hostname
            log_with_correlation(
                logger,
                logging.INFO,
                f"{request.method} {request.url.path} | Correlation ID origin: {origin} "
                f"| Timestamp: {datetime.now(timezone.utc).isoformat()} "
                f"| Service: {SERVICE_NAME} | Host: {hostname}",
                correlation_id,
            )

            body = await _body_snapshot(request)

            try:
                response = await call_next(request)
            except Exception as e:
                log_with_correlation(
                    logger,
                    logging.ERROR,
                    f"Unhandled error on {request.url.path}: {e}",
                    correlation_id,
                    exc_info=e,
                )
                response = JSONResponse(
                    status_code=500,
                    content={
                        "message": "Internal server error",
                        "correlationId": correlation_id,
                    },
                    headers={CORRELATION_HEADER: correlation_id},
                )

            self._on_complete(request, response, body, correlation_id, start, hostname)
            return response
        finally:
            reset_correlation_id(token)

    def _on_complete(
        self,
        request: Request,
        response: Response,
        body: Any,
        correlation_id: str,
        start: float,
        hostname: str | None,
    ) -> None:
        """Completion hook: runs once per request, after the response exists."""
        duration = round((time.perf_counter() - start) * 1000, 2)
        success = 200 <= response.status_code < 400

        log_with_correlation(
            logger,
            logging.INFO,
            f"Request finished | Status: {response.status_code} | Duration: {duration}ms "
            f"| Host: {hostname} | {'Success' if success else 'Failure'}",
            correlation_id,
        )

        self._request_logger.log_request_nowait(
            {
                "method": request.method,
                "endpoint": request.url.path,
                "statusCode": response.status_code,
                "duration": duration,
                "requestBody": body,
                "clientIp": request.client.host if request.client else None,
                "userAgent": request.headers.get("user-agent"),
            },
            correlation_id,
        )


class CorrelationHeaderMiddleware(BaseHTTPMiddleware):
    """Echoes the resolved correlation id on every response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        correlation_id = getattr(request.state, "correlation_id", None)
        if correlation_id:
            response.headers[CORRELATION_HEADER] = correlation_id
        return response
