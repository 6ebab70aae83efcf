"""
Ingestion module for the PDF question-answering engine.

This module provides document ingestion functionality including:
- Text chunking with overlap
- Retry policy for embedding calls
- Complete ingestion pipeline orchestration
"""

from pdf_rag.ingestion.chunker import TextChunker
from pdf_rag.ingestion.pipeline import IngestionPipeline
from pdf_rag.ingestion.retry import NO_RETRY, RetryPolicy

__all__ = [
    "TextChunker",
    "IngestionPipeline",
    "RetryPolicy",
    "NO_RETRY",
]
