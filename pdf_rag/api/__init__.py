"""
API module for the PDF question-answering engine.

This module provides the FastAPI application with REST endpoints,
request/response models, dependencies, and middleware.
"""

from pdf_rag.api.app import app, create_app
from pdf_rag.api.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    SourceDocument,
)
from pdf_rag.api.routes import router

__all__ = [
    # Application
    "app",
    "create_app",
    "router",
    # Request models
    "ChatRequest",
    # Response models
    "ChatResponse",
    "IngestResponse",
    "HealthResponse",
    "ErrorResponse",
    # Nested models
    "SourceDocument",
]
