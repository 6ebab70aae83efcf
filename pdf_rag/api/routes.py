"""
FastAPI routes for the PDF question-answering API.

This module defines the upload, chat and health endpoints. Engine errors are
raised as ``RAGException`` subclasses and converted to HTTP responses by the
handlers registered in ``pdf_rag.api.app``.
"""

from fastapi import APIRouter, File, UploadFile, status

from pdf_rag import __version__
from pdf_rag.api.dependencies import (
    IngestionPipelineDep,
    QueryPipelineDep,
    SettingsDep,
    VectorStoreDep,
)
from pdf_rag.api.models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    SourceDocument,
)
from pdf_rag.utils.exceptions import PayloadTooLargeError, UnsupportedMediaTypeError
from pdf_rag.utils.logging import LoggerMixin, get_correlation_id

# Create API router
router = APIRouter()

PDF_CONTENT_TYPE = "application/pdf"


class RouteHandlers(LoggerMixin):
    """Handler class for API routes with logging support."""


# Instantiate handler for logging
handler = RouteHandlers()


def _key_prefix(secret: str, length: int = 7) -> str | None:
    """Show only the first characters of a credential."""
    if not secret:
        return None
    return secret[:length] + "..."


@router.post(
    "/upload",
    response_model=IngestResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a PDF",
    description="Upload a PDF document; its text is chunked, embedded and indexed.",
    responses={
        200: {"description": "Document ingested"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Not a PDF"},
        422: {"model": ErrorResponse, "description": "No text could be extracted"},
        502: {"model": ErrorResponse, "description": "Embedding provider failed"},
        503: {"model": ErrorResponse, "description": "Vector store unavailable"},
    },
)
async def upload_document(
    settings: SettingsDep,
    pipeline: IngestionPipelineDep,
    file: UploadFile = File(..., description="PDF file to ingest"),
) -> IngestResponse:
    """
    Ingest an uploaded PDF.

    The content type and size are checked before any text is extracted.

    Raises:
        UnsupportedMediaTypeError: If the upload is not a PDF.
        PayloadTooLargeError: If the upload exceeds ``max_file_size_mb``.
    """
    correlation_id = get_correlation_id()
    filename = file.filename or "document.pdf"

    handler.logger.info(
        "upload_request_received",
        filename=filename,
        content_type=file.content_type,
        correlation_id=correlation_id,
    )

    if file.content_type != PDF_CONTENT_TYPE:
        handler.logger.warning(
            "upload_request_invalid_file_type",
            filename=filename,
            content_type=file.content_type,
            correlation_id=correlation_id,
        )
        raise UnsupportedMediaTypeError(
            "Please upload a PDF file",
            details={"filename": filename, "content_type": file.content_type},
        )

    max_bytes = settings.chunking.max_file_size_bytes
    content = await file.read(max_bytes + 1)

    if len(content) > max_bytes:
        handler.logger.warning(
            "upload_request_too_large",
            filename=filename,
            max_bytes=max_bytes,
            correlation_id=correlation_id,
        )
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {settings.chunking.max_file_size_mb}MB",
            details={"filename": filename, "max_bytes": max_bytes},
        )

    outcome = await pipeline.ingest(content, filename)

    handler.logger.info(
        "upload_request_completed",
        filename=filename,
        status=outcome.status.value,
        vectors_stored=outcome.vectors_stored,
        correlation_id=correlation_id,
    )

    return IngestResponse.from_outcome(outcome)


@router.post(
    "/chat",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    summary="Ask a question",
    description="Answer a question from the uploaded documents.",
    responses={
        200: {"description": "Answer with the fragments it was based on"},
        422: {"model": ErrorResponse, "description": "Invalid request"},
        502: {"model": ErrorResponse, "description": "Embedding or chat provider failed"},
        503: {"model": ErrorResponse, "description": "Vector store unavailable"},
    },
)
async def chat(
    request: ChatRequest,
    pipeline: QueryPipelineDep,
) -> ChatResponse:
    """Answer one question; no conversation history is kept."""
    correlation_id = get_correlation_id()

    handler.logger.info(
        "chat_request_received",
        message_length=len(request.message),
        correlation_id=correlation_id,
    )

    result = await pipeline.answer_with_sources(request.message)

    handler.logger.info(
        "chat_request_completed",
        source_count=len(result.sources),
        context_found=result.context_found,
        correlation_id=correlation_id,
    )

    return ChatResponse(
        response=result.answer,
        sources=[SourceDocument.from_match(match) for match in result.sources],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Probe the vector store and report which providers are configured.",
    responses={
        200: {"description": "System health status"},
    },
)
async def health_check(
    store: VectorStoreDep,
    settings: SettingsDep,
) -> HealthResponse:
    """Health and configuration check."""
    correlation_id = get_correlation_id()

    handler.logger.debug(
        "health_check_requested",
        correlation_id=correlation_id,
    )

    store_stats = None
    try:
        store_stats = await store.stats()
        vectorstore_healthy = True
    except Exception as e:
        handler.logger.warning(
            "health_check_vectorstore_unreachable",
            error=str(e),
            correlation_id=correlation_id,
        )
        vectorstore_healthy = False

    openai_key = settings.llm.openai_api_key.get_secret_value()
    uses_openai = (
        settings.llm.llm_provider == "openai"
        or settings.embedding.embedding_provider == "openai"
    )

    services = {
        "vectorstore": vectorstore_healthy,
        "credentials": bool(openai_key) or not uses_openai,
    }

    configuration = {
        "openai_configured": bool(openai_key),
        "openai_key_prefix": _key_prefix(openai_key),
        "llm_provider": settings.llm.llm_provider,
        "llm_model": settings.llm.llm_model,
        "embedding_provider": settings.embedding.embedding_provider,
        "embedding_model": settings.embedding.embedding_model,
        "collection": settings.chroma.collection,
    }

    return HealthResponse(
        status="healthy" if all(services.values()) else "degraded",
        services=services,
        configuration=configuration,
        vectorstore=store_stats,
        version=__version__,
    )


__all__ = ["router"]
