"""
Shared data model for ingestion and querying.

Fragments live only while one document is being ingested; IndexedVectors are
what the vector store persists; RetrievalMatches exist for the lifetime of a
single query; an IngestionOutcome summarises one ingestion run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple
from uuid import uuid4

# Fragments per "page" for the approximate page number shown to users.
# A display heuristic only; it has no relation to real PDF page boundaries.
FRAGMENTS_PER_PAGE = 10


def approximate_page_for(sequence_index: int) -> int:
    """Map a fragment position to its approximate 1-based page number."""
    return sequence_index // FRAGMENTS_PER_PAGE + 1


@dataclass(frozen=True)
class Fragment:
    """
    A contiguous slice of a document's text produced by chunking.

    Attributes:
        sequence_index: 0-based position among all fragments of one document
        text: Fragment text, never empty
    """
    sequence_index: int
    text: str

    def __post_init__(self) -> None:
        if self.sequence_index < 0:
            raise ValueError("sequence_index must be >= 0")
        if not self.text:
            raise ValueError("Fragment text must not be empty")

    @property
    def approximate_page(self) -> int:
        """Approximate 1-based page number, for display only."""
        return approximate_page_for(self.sequence_index)


@dataclass(frozen=True)
class IndexedVector:
    """
    The persisted unit: one embedded fragment plus its metadata.

    Attributes:
        id: Globally unique record id, generated at ingestion time
        embedding: Fixed-dimension embedding vector
        source_document: File name or identifier of the source document
        fragment_text: Fragment text, possibly truncated for storage
        sequence_index: Position of the fragment within its document
    """
    id: str
    embedding: List[float]
    source_document: str
    fragment_text: str
    sequence_index: int

    @classmethod
    def from_fragment(
        cls,
        fragment: Fragment,
        embedding: List[float],
        source_document: str,
        max_text_chars: int | None = None,
    ) -> "IndexedVector":
        """
        Build a record with a fresh id for an embedded fragment.

        Truncation applies to the stored text only; the id and embedding are
        taken as-is.
        """
        text = fragment.text
        if max_text_chars is not None and len(text) > max_text_chars:
            text = text[:max_text_chars]
        return cls(
            id=str(uuid4()),
            embedding=list(embedding),
            source_document=source_document,
            fragment_text=text,
            sequence_index=fragment.sequence_index,
        )

    @property
    def approximate_page(self) -> int:
        """Approximate 1-based page number, for display only."""
        return approximate_page_for(self.sequence_index)

    @property
    def dimension(self) -> int:
        """Length of the embedding vector."""
        return len(self.embedding)

    def metadata(self) -> Dict[str, Any]:
        """Flat metadata stored next to the vector."""
        return {
            "content": self.fragment_text,
            "source": self.source_document,
            "page_number": self.approximate_page,
            "chunk_index": self.sequence_index,
        }


@dataclass
class RetrievalMatch:
    """
    One result of a similarity query.

    Attributes:
        id: Record id
        metadata: Metadata stored with the record
        score: Store-defined similarity score (higher is more similar)
        rank: 0-based position in the store's best-to-worst ordering
    """
    id: str
    metadata: Dict[str, Any]
    score: float
    rank: int

    @property
    def text(self) -> str:
        """Stored fragment text, empty when missing."""
        return self.metadata.get("content") or ""

    @property
    def source(self) -> str:
        """Source document name."""
        return self.metadata.get("source", "unknown")

    @property
    def page_number(self) -> int | None:
        """Approximate page number recorded at ingestion."""
        return self.metadata.get("page_number")

    @property
    def preview(self) -> str:
        """First 100 characters of the fragment text."""
        text = self.text
        return text[:100] + "..." if len(text) > 100 else text


class IngestionStatus(str, Enum):
    """Final status of an ingestion run."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionOutcome:
    """
    Summary of one ingestion run.

    Attributes:
        document_name: Name of the ingested document
        fragments_total: Fragments produced by the chunker
        vectors_produced: Fragments that were embedded successfully
        vectors_stored: Vectors acknowledged by the vector store
        status: success, partial or failed
        failed_fragments: Sequence indexes skipped at the embedding step
    """
    document_name: str
    fragments_total: int
    vectors_produced: int
    vectors_stored: int
    status: IngestionStatus
    failed_fragments: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.vectors_stored > self.fragments_total:
            raise ValueError(
                f"vectors_stored ({self.vectors_stored}) cannot exceed "
                f"fragments_total ({self.fragments_total})"
            )
        if self.vectors_produced > self.fragments_total:
            raise ValueError(
                f"vectors_produced ({self.vectors_produced}) cannot exceed "
                f"fragments_total ({self.fragments_total})"
            )

    @classmethod
    def from_counts(
        cls,
        document_name: str,
        fragments_total: int,
        vectors_produced: int,
        vectors_stored: int,
        failed_fragments: Tuple[int, ...] = (),
    ) -> "IngestionOutcome":
        """
        Build an outcome for a run that stored at least one vector.

        Raises:
            ValueError: If ``vectors_stored`` is not positive; a run that
                stores nothing is reported by raising, not by an outcome.
        """
        if vectors_stored <= 0:
            raise ValueError(
                f"vectors_stored must be positive, got {vectors_stored}"
            )
        if vectors_stored == fragments_total:
            status = IngestionStatus.SUCCESS
        else:
            status = IngestionStatus.PARTIAL
        return cls(
            document_name=document_name,
            fragments_total=fragments_total,
            vectors_produced=vectors_produced,
            vectors_stored=vectors_stored,
            status=status,
            failed_fragments=tuple(failed_fragments),
        )

    @property
    def success(self) -> bool:
        """True when every fragment was stored."""
        return self.status is IngestionStatus.SUCCESS

    @property
    def message(self) -> str:
        """User-facing summary line."""
        return f"Successfully processed {self.vectors_stored} chunks from {self.document_name}"

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"{self.document_name} [{self.status.value}]: "
            f"{self.fragments_total} fragments → "
            f"{self.vectors_produced} embedded → "
            f"{self.vectors_stored} stored"
        )
