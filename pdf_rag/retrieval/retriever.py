"""
Retriever for semantic fragment search.

Embeds a question, asks the vector store for its nearest fragments and turns
the matches into a single context string for the chat model.
"""

from __future__ import annotations

from typing import List, Sequence

from pdf_rag.core.interfaces import Embedder, VectorStore
from pdf_rag.core.models import RetrievalMatch
from pdf_rag.utils.logging import LoggerMixin

CONTEXT_SEPARATOR = "\n\n"


def assemble_context(matches: Sequence[RetrievalMatch]) -> str:
    """
    Join match texts in store order, skipping matches with blank text.

    Returns:
        The context string; empty when no match carries text.
    """
    return CONTEXT_SEPARATOR.join(match.text for match in matches if match.text.strip())


class Retriever(LoggerMixin):
    """
    Top-k semantic retriever.

    The same ``Embedder`` used for ingestion must be used here, otherwise
    query and document vectors live in different spaces.

    Args:
        embedder: Embeds the question.
        store: Vector store to search.
        k: Number of fragments to retrieve (default: 5).
    """

    def __init__(self, embedder: Embedder, store: VectorStore, k: int = 5) -> None:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        self.embedder = embedder
        self.store = store
        self.k = k

        self.logger.info("Retriever initialized", k=k)

    async def retrieve(self, question: str) -> List[RetrievalMatch]:
        """
        Retrieve fragments relevant to the question.

        Embedding and store errors propagate unchanged.
        """
        vector = await self.embedder.embed(question)
        matches = await self.store.query(vector, self.k)

        self.logger.info(
            "Retrieval complete",
            question_length=len(question),
            num_results=len(matches),
            top_score=matches[0].score if matches else None,
        )
        return matches
