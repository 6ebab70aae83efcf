"""
Text chunker for the PDF question-answering engine.

This module splits extracted document text into overlapping fragments using
LangChain's RecursiveCharacterTextSplitter, preferring paragraph, then line,
then sentence, then word boundaries, and falling back to hard character cuts.
"""

from __future__ import annotations

from typing import List

from langchain_text_splitters import RecursiveCharacterTextSplitter

from pdf_rag.core.models import Fragment
from pdf_rag.utils.exceptions import EmptyInputError, NoFragmentsProducedError
from pdf_rag.utils.logging import LoggerMixin


class TextChunker(LoggerMixin):
    """
    Splits text into ordered, overlapping fragments.

    Fragments are numbered 0..n-1 in document order and never empty. Each
    fragment is at most ``chunk_size`` characters; consecutive fragments share
    at most ``chunk_overlap`` characters.

    Args:
        chunk_size: Maximum size of each fragment in characters.
        chunk_overlap: Number of characters to overlap between fragments.
        separators: Separators to split on, in order of priority.

    Example:
        >>> chunker = TextChunker(chunk_size=1000, chunk_overlap=200)
        >>> fragments = chunker.split("long text...")
        >>> fragments[0].sequence_index
        0
    """

    DEFAULT_SEPARATORS = [
        "\n\n",  # Paragraphs
        "\n",    # Lines
        ". ",    # Sentences
        "! ",    # Sentences
        "? ",    # Sentences
        " ",     # Words
        "",      # Characters
    ]

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: List[str] | None = None,
    ) -> None:
        """
        Initialize the text chunker.

        Raises:
            ValueError: If ``chunk_overlap`` is not smaller than ``chunk_size``.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size ({chunk_size}) must be positive")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap ({chunk_overlap}) must not be negative")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be less than chunk_size ({chunk_size})"
            )

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = separators if separators is not None else list(self.DEFAULT_SEPARATORS)

        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=self.separators,
            length_function=len,
            is_separator_regex=False,
            keep_separator="end",
            strip_whitespace=True,
        )

        self.logger.info(
            "TextChunker initialized",
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            num_separators=len(self.separators),
        )

    @classmethod
    def from_settings(cls, settings) -> "TextChunker":
        """Build a chunker from ``ChunkingSettings``."""
        return cls(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap)

    def split(self, text: str) -> List[Fragment]:
        """
        Split text into fragments.

        Args:
            text: Extracted document text.

        Returns:
            Fragments in document order, numbered from 0.

        Raises:
            EmptyInputError: If the text is empty or whitespace-only.
            NoFragmentsProducedError: If non-empty text produced no fragments.
        """
        if not text or not text.strip():
            raise EmptyInputError(
                "Cannot chunk empty text",
                details={"text_length": len(text or "")},
            )

        pieces = [piece for piece in self.splitter.split_text(text) if piece]

        if not pieces:
            raise NoFragmentsProducedError(
                "Splitting produced no fragments",
                details={"text_length": len(text), "chunk_size": self.chunk_size},
            )

        fragments = [
            Fragment(sequence_index=index, text=piece)
            for index, piece in enumerate(pieces)
        ]

        self.logger.debug(
            "Text chunked",
            text_length=len(text),
            num_fragments=len(fragments),
        )
        return fragments

    def estimate_fragments(self, text: str) -> int:
        """
        Rough fragment count for ``text`` without splitting it.

        Actual counts vary with where separators fall.
        """
        if not text or not text.strip():
            return 0
        step = self.chunk_size - self.chunk_overlap
        return max(1, -(-(len(text) - self.chunk_overlap) // step))

    def get_stats(self) -> dict:
        """Chunking configuration, for pipeline stats."""
        return {
            "chunk_size": self.chunk_size,
            "chunk_overlap": self.chunk_overlap,
            "separators": list(self.separators),
        }
