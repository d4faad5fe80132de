"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..app import Application
from .middleware import CorrelationHeaderMiddleware, CorrelationIdMiddleware
from .routes import create_pdf_router


def create_fastapi_app(application: Application) -> FastAPI:
    """Create and configure FastAPI application around a constructed Application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan."""
        # Startup
        await application.start()
        yield
        # Shutdown
        await application.stop()

    fastapi_app = FastAPI(
        title="Message Server API",
        description="Fetches PDFs from storage and relays them to a webhook",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.application = application

    # Last added runs first: the id must exist before the header stage reads it
    fastapi_app.add_middleware(CorrelationHeaderMiddleware)
    fastapi_app.add_middleware(
        CorrelationIdMiddleware, request_logger=application.telemetry.requests
    )

    fastapi_app.include_router(create_pdf_router(application))

    return fastapi_app
