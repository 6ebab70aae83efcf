"""
API request and response models for the PDF question-answering engine.

This module defines Pydantic models for API requests and responses,
providing validation, serialization, and documentation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdf_rag.core.models import IngestionOutcome, RetrievalMatch


class SourceDocument(BaseModel):
    """
    Source fragment reference in chat responses.

    Attributes:
        filename: Name of the source document
        page: Approximate page number recorded at ingestion
        chunk_index: Position of the fragment within its document
        relevance_score: Similarity score from retrieval (0-1)
        content_preview: Preview of the fragment text
    """
    filename: str = Field(..., description="Source document filename")
    page: Optional[int] = Field(None, description="Approximate page number in document")
    chunk_index: Optional[int] = Field(None, description="Fragment position in document")
    relevance_score: float = Field(..., description="Relevance score (0-1)", ge=0.0)
    content_preview: Optional[str] = Field(None, description="Preview of matched content")

    @field_validator("relevance_score", mode="before")
    @classmethod
    def clamp_relevance_score(cls, v: float) -> float:
        """Clamp score to valid range (cosine similarity can fall below 0)."""
        return min(max(float(v), 0.0), 1.0)

    @classmethod
    def from_match(cls, match: RetrievalMatch) -> "SourceDocument":
        return cls(
            filename=match.source,
            page=match.page_number,
            chunk_index=match.metadata.get("chunk_index"),
            relevance_score=match.score,
            content_preview=match.preview or None,
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filename": "whales.pdf",
                "page": 1,
                "chunk_index": 3,
                "relevance_score": 0.91,
                "content_preview": "Blue whales feed almost exclusively on krill...",
            }
        }
    )


class ChatRequest(BaseModel):
    """
    Request model for chat endpoint.

    Attributes:
        message: User's question
    """
    message: str = Field(..., description="User's question", min_length=1, max_length=4000)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Validate message is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Message cannot be empty or whitespace only")
        return v.strip()

    model_config = ConfigDict(
        json_schema_extra={"example": {"message": "What do whales eat?"}}
    )


class ChatResponse(BaseModel):
    """
    Response model for chat endpoint.

    Attributes:
        response: Generated answer or a fixed fallback message
        sources: Fragments the answer was grounded on
    """
    response: str = Field(..., description="Generated answer")
    sources: List[SourceDocument] = Field(default_factory=list, description="Source fragments")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "response": "Whales eat krill.",
                "sources": [
                    {"filename": "whales.pdf", "page": 1, "relevance_score": 0.91}
                ],
            }
        }
    )


class IngestResponse(BaseModel):
    """
    Response model for the upload endpoint.

    Attributes:
        message: Human-readable summary
        document_name: Name of the uploaded file
        status: success, partial or failed
        fragments_total: Fragments produced by chunking
        vectors_produced: Fragments embedded successfully
        vectors_stored: Vectors written to the store
        failed_fragments: Positions of fragments skipped at embedding
    """
    message: str = Field(..., description="Summary message")
    document_name: str = Field(..., description="Uploaded filename")
    status: str = Field(..., description="Ingestion status (success/partial/failed)")
    fragments_total: int = Field(..., description="Number of fragments created", ge=0)
    vectors_produced: int = Field(..., description="Number of fragments embedded", ge=0)
    vectors_stored: int = Field(..., description="Number of vectors stored", ge=0)
    failed_fragments: List[int] = Field(default_factory=list, description="Skipped fragment positions")

    @classmethod
    def from_outcome(cls, outcome: IngestionOutcome) -> "IngestResponse":
        return cls(
            message=outcome.message,
            document_name=outcome.document_name,
            status=outcome.status.value,
            fragments_total=outcome.fragments_total,
            vectors_produced=outcome.vectors_produced,
            vectors_stored=outcome.vectors_stored,
            failed_fragments=list(outcome.failed_fragments),
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Successfully processed 12 chunks from whales.pdf",
                "document_name": "whales.pdf",
                "status": "success",
                "fragments_total": 12,
                "vectors_produced": 12,
                "vectors_stored": 12,
                "failed_fragments": [],
            }
        }
    )


class HealthResponse(BaseModel):
    """
    Response model for health check endpoint.

    Attributes:
        status: Overall system status
        services: Reachability of individual services
        configuration: Which credentials and settings are present
        vectorstore: Collection stats when the store is reachable
        version: API version
    """
    status: str = Field(..., description="Overall system status (healthy/degraded)")
    services: Dict[str, bool] = Field(..., description="Individual service status")
    configuration: Dict[str, Any] = Field(default_factory=dict, description="Configuration summary")
    vectorstore: Optional[Dict[str, Any]] = Field(None, description="Vector store statistics")
    version: str = Field(..., description="API version")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "services": {"vectorstore": True},
                "configuration": {
                    "openai_configured": True,
                    "openai_key_prefix": "sk-proj...",
                    "llm_provider": "openai",
                    "embedding_provider": "openai",
                    "collection": "pdf-documents",
                },
                "vectorstore": {"collection_name": "pdf-documents", "total_vectors": 120},
                "version": "1.0.0",
            }
        }
    )


class ErrorResponse(BaseModel):
    """
    Standard error response model.

    Attributes:
        error: Error type/category
        message: Human-readable error message
        detail: Optional detailed error information
        correlation_id: Request correlation ID for tracing
    """
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "UnsupportedMediaTypeError",
                "message": "Please upload a PDF file",
                "detail": "{'content_type': 'text/plain'}",
                "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
            }
        }
    )


__all__ = [
    "SourceDocument",
    "ChatRequest",
    "ChatResponse",
    "IngestResponse",
    "HealthResponse",
    "ErrorResponse",
]
