"""
Question answering over ingested documents.

Embeds the question, retrieves the nearest fragments, assembles them into a
context and asks the chat model to answer from that context only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pdf_rag.chat.prompts import (
    NO_CONTEXT_MESSAGE,
    NO_RESPONSE_MESSAGE,
    SYSTEM_INSTRUCTION,
    build_user_message,
)
from pdf_rag.core.interfaces import Completer, Embedder, VectorStore
from pdf_rag.core.models import RetrievalMatch
from pdf_rag.retrieval.retriever import Retriever, assemble_context
from pdf_rag.utils.exceptions import NoResponseGeneratedError
from pdf_rag.utils.logging import LoggerMixin


@dataclass
class QueryResult:
    """
    Answer to one question plus the fragments it was grounded on.

    Attributes:
        answer: Model reply or one of the fixed fallback messages
        sources: Matches whose text went into the context, in store order
        context_found: False when retrieval produced no usable context
    """
    answer: str
    sources: List[RetrievalMatch] = field(default_factory=list)
    context_found: bool = True


class QueryPipeline(LoggerMixin):
    """
    Stateless retrieve-then-generate pipeline.

    Each call is independent: no conversation history, no caching, no retry.
    Embedding, retrieval and completion failures propagate to the caller;
    an empty model reply becomes ``NO_RESPONSE_MESSAGE``.

    Args:
        embedder: Embeds the question; must be the one used for ingestion.
        store: Vector store to search.
        completer: Chat model answering from the context.
        top_k: Number of fragments to retrieve (default: 5).

    Example:
        >>> pipeline = QueryPipeline(embedder, store, completer)
        >>> await pipeline.answer("What do whales eat?")
        'Whales eat krill.'
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        completer: Completer,
        top_k: int = 5,
    ) -> None:
        self.retriever = Retriever(embedder, store, k=top_k)
        self.completer = completer

        self.logger.info("initialized_query_pipeline", top_k=top_k)

    @property
    def top_k(self) -> int:
        return self.retriever.k

    async def answer(self, question: str) -> str:
        """
        Answer a question from the ingested documents.

        Raises:
            ValueError: If the question is empty.
            EmbeddingGenerationError: If the question could not be embedded.
            VectorStoreError: If the store query failed.
            CompletionError: If the chat model call failed.
        """
        result = await self.answer_with_sources(question)
        return result.answer

    async def answer_with_sources(self, question: str) -> QueryResult:
        """Answer a question and report the fragments used as context."""
        if not question or not question.strip():
            raise ValueError("Question must not be empty")

        self.logger.info("processing_question", question_length=len(question))

        matches = await self.retriever.retrieve(question)
        sources = [match for match in matches if match.text.strip()]
        context = assemble_context(sources)

        if not context:
            self.logger.info("no_context_found", num_matches=len(matches))
            return QueryResult(answer=NO_CONTEXT_MESSAGE, sources=[], context_found=False)

        try:
            answer = await self._generate(context, question)
        except NoResponseGeneratedError as e:
            self.logger.warning("no_response_generated", error=str(e))
            answer = NO_RESPONSE_MESSAGE

        self.logger.info(
            "question_answered",
            answer_length=len(answer),
            num_sources=len(sources),
        )
        return QueryResult(answer=answer, sources=sources)

    async def _generate(self, context: str, question: str) -> str:
        reply = await self.completer.complete(
            SYSTEM_INSTRUCTION,
            [build_user_message(context, question)],
        )
        if not reply or not reply.strip():
            raise NoResponseGeneratedError(
                "Chat model returned empty content",
                details={"context_length": len(context)},
            )
        return reply
