"""
Capability ports for the external services the pipelines orchestrate.

The pipelines depend only on these protocols; production adapters live next
door (extractor, embeddings, vectorstore, llm) and tests inject stubs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from pdf_rag.core.models import IndexedVector, RetrievalMatch


@runtime_checkable
class TextExtractor(Protocol):
    """Turns raw document bytes into plain text."""

    def extract(self, content: bytes) -> str:
        """Return the document text; may raise on corrupt or unsupported input."""


@runtime_checkable
class Embedder(Protocol):
    """Maps text to a fixed-length vector."""

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of ``text``."""


@runtime_checkable
class VectorStore(Protocol):
    """Persists (id, vector, metadata) records and answers nearest-neighbour queries."""

    async def upsert(self, records: Sequence[IndexedVector]) -> int:
        """Write ``records``; return how many were acknowledged."""

    async def query(self, vector: Sequence[float], top_k: int) -> list[RetrievalMatch]:
        """Return up to ``top_k`` matches ordered best to worst."""

    async def stats(self) -> dict[str, Any]:
        """Return index health information."""


@runtime_checkable
class Completer(Protocol):
    """Chat-completion model."""

    async def complete(self, system_instruction: str, messages: Sequence[str]) -> str:
        """Return the model's reply, or an empty string when it produced nothing."""
