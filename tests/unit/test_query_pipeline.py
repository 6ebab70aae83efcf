"""
Unit tests for the query pipeline.

Tests retrieval, context assembly, fallback replies and error propagation
with in-process embedder, store and completer stand-ins.
"""

import pytest
from hypothesis import given

from pdf_rag.chat.pipeline import QueryPipeline, QueryResult
from pdf_rag.chat.prompts import (
    NO_CONTEXT_MESSAGE,
    NO_RESPONSE_MESSAGE,
    SYSTEM_INSTRUCTION,
)
from pdf_rag.core.models import RetrievalMatch
from pdf_rag.ingestion.chunker import TextChunker
from pdf_rag.ingestion.pipeline import IngestionPipeline
from pdf_rag.utils.exceptions import CompletionError, EmbeddingGenerationError
from tests.stubs import (
    EchoCompleter,
    InMemoryVectorStore,
    KeywordEmbedder,
    StaticMatchStore,
    StubExtractor,
)
from tests.strategies import retrieval_matches


def match(rank: int, content: str | None, source: str = "doc.pdf") -> RetrievalMatch:
    metadata = {"source": source, "page_number": 1, "chunk_index": rank}
    if content is not None:
        metadata["content"] = content
    return RetrievalMatch(id=f"id-{rank}", metadata=metadata, score=0.9 - rank * 0.1, rank=rank)


class FailingCompleter:
    async def complete(self, system_instruction, messages):
        raise CompletionError("quota exceeded")


class TestQueryPipelineInit:
    """Test QueryPipeline initialization."""

    def test_default_top_k(self, embedder, store, completer):
        pipeline = QueryPipeline(embedder, store, completer)

        assert pipeline.top_k == 5

    def test_custom_top_k(self, embedder, store, completer):
        pipeline = QueryPipeline(embedder, store, completer, top_k=3)

        assert pipeline.top_k == 3

    def test_invalid_top_k(self, embedder, store, completer):
        with pytest.raises(ValueError):
            QueryPipeline(embedder, store, completer, top_k=0)


class TestAnswer:
    """Test answering questions."""

    @pytest.mark.asyncio
    async def test_end_to_end_with_ingested_document(self, embedder, store, completer, recording_sleep):
        ingestion = IngestionPipeline(
            extractor=StubExtractor(text="unused"),
            chunker=TextChunker(),
            embedder=embedder,
            store=store,
            sleep=recording_sleep,
        )
        await ingestion.ingest_text("This document is about whales.", "whales.pdf")
        pipeline = QueryPipeline(embedder, store, completer)

        answer = await pipeline.answer("What is the document about?")

        assert "whales" in answer
        assert completer.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_store_returns_fallback(self, embedder, store, completer):
        pipeline = QueryPipeline(embedder, store, completer)

        answer = await pipeline.answer("Anything?")

        assert answer == NO_CONTEXT_MESSAGE
        assert completer.call_count == 0

    @pytest.mark.asyncio
    async def test_matches_without_text_give_no_context(self, embedder, completer):
        store = StaticMatchStore([match(0, ""), match(1, None), match(2, "   \n ")])
        pipeline = QueryPipeline(embedder, store, completer)

        result = await pipeline.answer_with_sources("Anything?")

        assert result.answer == NO_CONTEXT_MESSAGE
        assert result.context_found is False
        assert result.sources == []
        assert completer.call_count == 0

    @pytest.mark.asyncio
    async def test_empty_reply_returns_fallback(self, embedder, store):
        completer = EchoCompleter(reply="   ")
        pipeline = QueryPipeline(embedder, StaticMatchStore([match(0, "Whales eat krill.")]), completer)

        answer = await pipeline.answer("What do whales eat?")

        assert answer == NO_RESPONSE_MESSAGE
        assert completer.call_count == 1

    @pytest.mark.asyncio
    async def test_prompt_format(self, embedder, completer):
        store = StaticMatchStore([match(0, "Whales eat krill."), match(1, "Krill are small.")])
        pipeline = QueryPipeline(embedder, store, completer)

        await pipeline.answer("What do whales eat?")

        system_instruction, messages = completer.calls[0]
        assert system_instruction == SYSTEM_INSTRUCTION
        assert messages == [
            "Context: Whales eat krill.\n\nKrill are small.\n\nQuestion: What do whales eat?"
        ]

    @pytest.mark.asyncio
    async def test_context_skips_empty_matches(self, embedder, completer):
        store = StaticMatchStore([match(0, "First."), match(1, ""), match(2, "Third.")])
        pipeline = QueryPipeline(embedder, store, completer)

        result = await pipeline.answer_with_sources("Question?")

        assert "First.\n\nThird." in result.answer
        assert [m.id for m in result.sources] == ["id-0", "id-2"]

    @pytest.mark.asyncio
    async def test_top_k_passed_to_store(self, embedder, store, completer):
        pipeline = QueryPipeline(embedder, store, completer, top_k=2)

        await pipeline.answer("Anything?")

        assert store.query_calls[0][1] == 2

    @pytest.mark.asyncio
    async def test_answer_with_sources_result(self, embedder, completer):
        store = StaticMatchStore([match(0, "Whales eat krill.", source="whales.pdf")])
        pipeline = QueryPipeline(embedder, store, completer)

        result = await pipeline.answer_with_sources("What do whales eat?")

        assert isinstance(result, QueryResult)
        assert result.context_found is True
        assert result.sources[0].source == "whales.pdf"


class TestAnswerErrors:
    """Test input validation and error propagation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", ["", "   ", "\n"])
    async def test_empty_question_rejected(self, embedder, store, completer, question):
        pipeline = QueryPipeline(embedder, store, completer)

        with pytest.raises(ValueError):
            await pipeline.answer(question)

        assert embedder.call_count == 0

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self, store, completer):
        pipeline = QueryPipeline(KeywordEmbedder(fail_on=["whales"]), store, completer)

        with pytest.raises(EmbeddingGenerationError):
            await pipeline.answer("What do whales eat?")

        assert store.query_calls == []

    @pytest.mark.asyncio
    async def test_completion_failure_propagates(self, embedder):
        store = StaticMatchStore([match(0, "Whales eat krill.")])
        pipeline = QueryPipeline(embedder, store, FailingCompleter())

        with pytest.raises(CompletionError):
            await pipeline.answer("What do whales eat?")


class TestQueryProperties:
    """Property-based tests for context handling."""

    @pytest.mark.asyncio
    @given(matches=retrieval_matches())
    async def test_completer_called_only_with_context(self, matches):
        completer = EchoCompleter()
        pipeline = QueryPipeline(KeywordEmbedder(), StaticMatchStore(matches), completer, top_k=10)

        result = await pipeline.answer_with_sources("Question?")

        has_text = any(m.text.strip() for m in matches)
        assert completer.call_count == (1 if has_text else 0)
        assert result.context_found is has_text
        assert all(m.text.strip() for m in result.sources)
