"""PDF relay API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ...app import Application


class ProcessMessageResponse(BaseModel):
    """Response model for a relayed PDF."""

    message: str
    pdfFileSize: str
    platformType: str | None = None
    discordStatus: int
    executionTimeMs: float


class ErrorResponse(BaseModel):
    """Response model for a rejected or failed job."""

    message: str
    error: str | None = None
    correlationId: str | None = None


def create_pdf_router(app: Application) -> APIRouter:
    """Create PDF router."""
    router = APIRouter(prefix="/api/pdf", tags=["pdf"])

    @router.post(
        "/process-message",
        response_model=ProcessMessageResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def process_message(request: Request) -> JSONResponse:
        """Fetch the job's PDF from storage and relay it to the webhook."""
        try:
            body = await request.json()
        except ValueError:
            # Unparseable bodies fail validation like empty ones
            body = {}

        result = await app.orchestrator.process_message(
            body,
            correlation_id=request.state.correlation_id,
            endpoint=request.url.path,
            method=request.method,
        )

        if result.status_code == 200:
            content = ProcessMessageResponse(**result.body).model_dump()
        else:
            content = ErrorResponse(**result.body).model_dump(exclude_none=True)
        return JSONResponse(status_code=result.status_code, content=content)

    return router
