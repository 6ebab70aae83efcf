"""
Retrieval module for the PDF question-answering engine.

Top-k semantic search over ingested fragments and context assembly.
"""

from pdf_rag.retrieval.retriever import Retriever, assemble_context

__all__ = [
    "Retriever",
    "assemble_context",
]
