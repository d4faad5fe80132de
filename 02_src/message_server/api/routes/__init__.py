"""API routes."""

from .pdf import create_pdf_router

__all__ = ["create_pdf_router"]
