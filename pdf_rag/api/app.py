"""
Main FastAPI application for the PDF question-answering engine.

This module creates and configures the FastAPI application with
routes, middleware, and exception handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdf_rag import __version__
from pdf_rag.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from pdf_rag.api.models import ErrorResponse
from pdf_rag.api.routes import router as api_router
from pdf_rag.config.settings import get_settings
from pdf_rag.utils.exceptions import RAGException, get_http_status_code
from pdf_rag.utils.logging import get_correlation_id, get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan context manager.

    Configures logging on startup.
    """
    settings = get_settings()
    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        app_name=settings.app_name,
    )

    logger.info(
        "application_started",
        version=app.version,
        environment=settings.environment,
    )

    yield

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="PDF RAG API",
        description="Upload PDF documents and ask questions answered from their content",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if settings.api.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(
            "cors_middleware_configured",
            origins=settings.api.cors_origins_list,
        )

    # Correlation ID must wrap request logging so log lines carry it
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(
        api_router,
        prefix="/api/v1",
        tags=["PDF RAG"],
    )

    @app.exception_handler(RAGException)
    async def rag_exception_handler(
        request: Request,
        exc: RAGException,
    ) -> JSONResponse:
        """Handle all engine exceptions."""
        correlation_id = get_correlation_id()
        status_code = get_http_status_code(exc)

        log = logger.warning if status_code < 500 else logger.error
        log(
            "rag_exception",
            exception_type=exc.__class__.__name__,
            message=exc.message,
            details=exc.details,
            status_code=status_code,
            path=request.url.path,
            exc_info=status_code >= 500,
        )

        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=exc.__class__.__name__,
                message=exc.message,
                detail=str(exc.details) if exc.details else None,
                correlation_id=correlation_id,
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle request validation errors."""
        correlation_id = get_correlation_id()

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="ValidationError",
                message="Request validation failed",
                detail=str(exc.errors()),
                correlation_id=correlation_id,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        correlation_id = get_correlation_id()

        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="InternalServerError",
                message="An unexpected error occurred",
                detail=str(exc) if settings.is_debug else None,
                correlation_id=correlation_id,
            ).model_dump(),
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="Root endpoint",
        description="Returns API information and status.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": "PDF RAG API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    logger.info("application_created")

    return app


# Create application instance
app = create_app()


__all__ = ["app", "create_app"]
