"""
Custom exception hierarchy for the PDF question-answering engine.

Every error names the capability that failed (extraction, chunking, embedding,
storage, completion) so callers can render actionable messages.
"""

from typing import Any, Dict, Optional


class RAGException(Exception):
    """
    Base exception for all engine errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
        cause: Optional underlying exception that caused this error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize RAG exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of the exception."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message

    def __repr__(self) -> str:
        """Return detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"cause={self.cause!r})"
        )


# =============================================================================
# Document Ingestion Errors
# =============================================================================

class DocumentIngestionError(RAGException):
    """Error during the document ingestion process."""
    pass


class ExtractionError(DocumentIngestionError):
    """
    Text could not be extracted from the uploaded document.

    Raised when the extractor throws (corrupt, encrypted or unsupported PDF)
    or returns no text at all (e.g. an image-only scan).
    """
    pass


class ChunkingError(DocumentIngestionError):
    """Extracted text could not be split into fragments."""
    pass


class EmptyInputError(ChunkingError):
    """The text handed to the chunker is empty or whitespace-only."""
    pass


class NoFragmentsProducedError(ChunkingError):
    """
    Splitting non-empty text yielded zero fragments.

    This indicates a chunker bug; it must not occur for valid input.
    """
    pass


# =============================================================================
# Embedding Errors
# =============================================================================

class EmbeddingError(RAGException):
    """Error with embedding generation."""
    pass


class EmbeddingGenerationError(EmbeddingError):
    """
    The embedding capability failed or returned an empty vector.

    During ingestion this is recovered per fragment; during a query it is fatal.
    """
    pass


class NoVectorsProducedError(EmbeddingError):
    """Every fragment of a document failed to embed."""
    pass


# =============================================================================
# Vector Store Errors
# =============================================================================

class VectorStoreError(RAGException):
    """Error with vector store operations."""
    pass


class VectorStoreConnectionError(VectorStoreError):
    """Unable to establish a connection to the vector store."""
    pass


class StorageWriteError(VectorStoreError):
    """
    An upsert batch was rejected by the vector store.

    The run is aborted immediately. ``details["vectors_stored"]`` reports how
    many records earlier batches wrote before the failure.
    """
    pass


class VectorStoreRetrievalError(VectorStoreError):
    """A similarity query against the vector store failed."""
    pass


class DimensionMismatchError(VectorStoreError):
    """A vector's dimension differs from the index's configured dimension."""
    pass


# =============================================================================
# Completion Errors
# =============================================================================

class LLMError(RAGException):
    """Error with chat-completion operations."""
    pass


class CompletionError(LLMError):
    """The chat-completion call itself failed (network, auth, quota)."""
    pass


class NoResponseGeneratedError(LLMError):
    """
    The chat model answered with no usable content.

    Never propagated to callers: the query pipeline turns it into a fallback
    reply.
    """
    pass


# =============================================================================
# API Errors
# =============================================================================

class APIError(RAGException):
    """Error with REST API request handling."""
    pass


class ValidationError(APIError):
    """
    Request validation error.

    Raised when an API request fails validation (note: Pydantic also has
    ValidationError, use this for custom validations).
    """
    pass


class UnsupportedMediaTypeError(ValidationError):
    """The uploaded file is not a PDF."""
    pass


class PayloadTooLargeError(ValidationError):
    """The uploaded file exceeds the configured size cap."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def get_http_status_code(exception: Exception) -> int:
    """
    Map exception to appropriate HTTP status code.

    More specific classes are listed before their parents, the first
    ``isinstance`` match wins.

    Args:
        exception: Exception instance

    Returns:
        HTTP status code (400-599)
    """
    status_map = [
        # Client errors (400-499)
        (UnsupportedMediaTypeError, 415),
        (PayloadTooLargeError, 413),
        (ValidationError, 400),
        (ExtractionError, 422),
        (ChunkingError, 422),
        (DocumentIngestionError, 422),
        # Server errors (500-599)
        (NoVectorsProducedError, 502),
        (EmbeddingError, 502),
        (LLMError, 502),
        (VectorStoreError, 503),
        (RAGException, 500),
    ]

    for exc_type, status_code in status_map:
        if isinstance(exception, exc_type):
            return status_code

    return 500


__all__ = [
    # Base exception
    "RAGException",
    # Document ingestion
    "DocumentIngestionError",
    "ExtractionError",
    "ChunkingError",
    "EmptyInputError",
    "NoFragmentsProducedError",
    # Embeddings
    "EmbeddingError",
    "EmbeddingGenerationError",
    "NoVectorsProducedError",
    # Vector store
    "VectorStoreError",
    "VectorStoreConnectionError",
    "StorageWriteError",
    "VectorStoreRetrievalError",
    "DimensionMismatchError",
    # Completion
    "LLMError",
    "CompletionError",
    "NoResponseGeneratedError",
    # API
    "APIError",
    "ValidationError",
    "UnsupportedMediaTypeError",
    "PayloadTooLargeError",
    # Utilities
    "get_http_status_code",
]
