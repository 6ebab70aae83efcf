"""
Ingestion pipeline for the PDF question-answering engine.

This module orchestrates the complete document ingestion workflow:
1. Extract text from the uploaded PDF bytes
2. Chunk the text into overlapping fragments
3. Embed fragments in paced batches, retrying and skipping failures
4. Upsert the resulting vectors into the vector store in batches
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Sequence, Tuple

from pdf_rag.config.settings import IngestionSettings
from pdf_rag.core.interfaces import Embedder, TextExtractor, VectorStore
from pdf_rag.core.models import Fragment, IndexedVector, IngestionOutcome
from pdf_rag.ingestion.chunker import TextChunker
from pdf_rag.ingestion.retry import RetryPolicy, SleepFunc
from pdf_rag.utils.exceptions import (
    EmbeddingGenerationError,
    ExtractionError,
    NoVectorsProducedError,
    StorageWriteError,
)
from pdf_rag.utils.logging import LoggerMixin


class IngestionPipeline(LoggerMixin):
    """
    Complete document ingestion pipeline.

    One call to ``ingest`` processes one document as a single sequential
    task. Embedding runs in batches of ``embedding_batch_size`` with a pause
    of ``embedding_batch_delay`` seconds between batches; a fragment whose
    embedding still fails after the retry policy is exhausted is skipped and
    recorded in the outcome. Storage failures are fatal.

    Every run assigns fresh record ids, so ingesting the same document twice
    stores its fragments twice.

    Args:
        extractor: Turns PDF bytes into text.
        chunker: Splits text into fragments.
        embedder: Embeds one fragment at a time.
        store: Vector store receiving the records.
        settings: Batching, pacing and retry configuration.
        retry_policy: Overrides the policy derived from ``settings``.
        sleep: Async sleep used for pacing and retry backoff.

    Example:
        >>> pipeline = IngestionPipeline(extractor, chunker, embedder, store)
        >>> outcome = await pipeline.ingest(pdf_bytes, "whales.pdf")
        >>> print(outcome)
        whales.pdf [success]: 12 fragments → 12 embedded → 12 stored
    """

    def __init__(
        self,
        extractor: TextExtractor,
        chunker: TextChunker,
        embedder: Embedder,
        store: VectorStore,
        settings: IngestionSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.extractor = extractor
        self.chunker = chunker
        self.embedder = embedder
        self.store = store
        self.settings = settings or IngestionSettings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)
        self._sleep = sleep

        self.logger.info(
            "IngestionPipeline initialized",
            chunk_size=chunker.chunk_size,
            chunk_overlap=chunker.chunk_overlap,
            embedding_batch_size=self.settings.embedding_batch_size,
            upsert_batch_size=self.settings.upsert_batch_size,
            max_attempts=self.retry_policy.max_attempts,
        )

    async def ingest(self, content: bytes, document_name: str) -> IngestionOutcome:
        """
        Ingest one PDF document.

        Args:
            content: Raw PDF bytes.
            document_name: File name recorded as the source of every fragment.

        Returns:
            IngestionOutcome summarising the run.

        Raises:
            ExtractionError: If no text could be extracted.
            ChunkingError: If the text could not be split.
            NoVectorsProducedError: If every fragment failed to embed.
            StorageWriteError: If an upsert batch failed.
        """
        self.logger.info(
            "ingestion_started",
            document_name=document_name,
            num_bytes=len(content),
        )

        try:
            text = await asyncio.to_thread(self.extractor.extract, content)
        except Exception as e:
            self.logger.error(
                "extraction_failed",
                document_name=document_name,
                error=str(e),
            )
            raise ExtractionError(
                f"Could not extract text from {document_name}",
                details={"document_name": document_name, "error": str(e)},
                cause=e,
            ) from e

        if not text or not text.strip():
            self.logger.warning("extraction_empty", document_name=document_name)
            raise ExtractionError(
                f"No text found in {document_name}",
                details={"document_name": document_name},
            )

        return await self.ingest_text(text, document_name)

    async def ingest_text(self, text: str, document_name: str) -> IngestionOutcome:
        """
        Ingest already-extracted text (chunk, embed, store).

        Raises:
            ChunkingError: If the text could not be split.
            NoVectorsProducedError: If every fragment failed to embed.
            StorageWriteError: If an upsert batch failed.
        """
        fragments = self.chunker.split(text)

        self.logger.info(
            "document_chunked",
            document_name=document_name,
            text_length=len(text),
            estimated_fragments=self.chunker.estimate_fragments(text),
            num_fragments=len(fragments),
        )

        records, failed = await self._embed_fragments(fragments, document_name)

        if not records:
            self.logger.error(
                "no_vectors_produced",
                document_name=document_name,
                fragments_total=len(fragments),
            )
            raise NoVectorsProducedError(
                f"No fragment of {document_name} could be embedded",
                details={
                    "document_name": document_name,
                    "fragments_total": len(fragments),
                },
            )

        stored = await self._store_records(records, document_name)

        outcome = IngestionOutcome.from_counts(
            document_name=document_name,
            fragments_total=len(fragments),
            vectors_produced=len(records),
            vectors_stored=stored,
            failed_fragments=tuple(failed),
        )

        self.logger.info(
            "ingestion_completed",
            document_name=document_name,
            status=outcome.status.value,
            fragments_total=outcome.fragments_total,
            vectors_produced=outcome.vectors_produced,
            vectors_stored=outcome.vectors_stored,
            failed_fragments=len(failed),
        )
        return outcome

    async def _embed_one(self, text: str) -> List[float]:
        vector = await self.embedder.embed(text)
        if not vector:
            raise EmbeddingGenerationError(
                "Embedder returned an empty vector",
                details={"text_length": len(text)},
            )
        return vector

    async def _embed_fragments(
        self,
        fragments: Sequence[Fragment],
        document_name: str,
    ) -> Tuple[List[IndexedVector], List[int]]:
        """Embed fragments in paced batches; return records and skipped indexes."""
        batch_size = self.settings.embedding_batch_size
        delay = self.settings.embedding_batch_delay
        records: List[IndexedVector] = []
        failed: List[int] = []

        starts = range(0, len(fragments), batch_size)
        for batch_number, start in enumerate(starts):
            batch = fragments[start:start + batch_size]

            for fragment in batch:
                try:
                    vector = await self.retry_policy.build(self._sleep)(
                        self._embed_one, fragment.text
                    )
                except Exception as e:
                    self.logger.warning(
                        "fragment_embedding_skipped",
                        document_name=document_name,
                        sequence_index=fragment.sequence_index,
                        attempts=self.retry_policy.max_attempts,
                        error=str(e),
                    )
                    failed.append(fragment.sequence_index)
                    continue

                records.append(
                    IndexedVector.from_fragment(
                        fragment,
                        vector,
                        document_name,
                        max_text_chars=self.settings.max_stored_text_chars,
                    )
                )

            self.logger.debug(
                "embedding_batch_completed",
                document_name=document_name,
                batch=batch_number,
                embedded=len(records),
                failed=len(failed),
            )

            if batch_number < len(starts) - 1 and delay > 0:
                await self._sleep(delay)

        return records, failed

    async def _store_records(
        self,
        records: Sequence[IndexedVector],
        document_name: str,
    ) -> int:
        """Upsert records in batches; the first failing batch aborts the run."""
        batch_size = self.settings.upsert_batch_size
        delay = self.settings.upsert_batch_delay
        stored = 0

        starts = range(0, len(records), batch_size)
        for batch_index, start in enumerate(starts):
            batch = records[start:start + batch_size]

            try:
                written = await self.store.upsert(batch)
            except Exception as e:
                self.logger.error(
                    "upsert_batch_failed",
                    document_name=document_name,
                    batch_index=batch_index,
                    vectors_stored=stored,
                    error=str(e),
                )
                raise StorageWriteError(
                    f"Failed to store vectors for {document_name}",
                    details={
                        "document_name": document_name,
                        "batch_index": batch_index,
                        "vectors_stored": stored,
                        "vectors_produced": len(records),
                    },
                    cause=e,
                ) from e

            if written < len(batch):
                self.logger.error(
                    "upsert_batch_short",
                    document_name=document_name,
                    batch_index=batch_index,
                    acknowledged=written,
                    batch_size=len(batch),
                    vectors_stored=stored,
                )
                raise StorageWriteError(
                    f"Vector store acknowledged {written} of {len(batch)} vectors "
                    f"for {document_name}",
                    details={
                        "document_name": document_name,
                        "batch_index": batch_index,
                        "acknowledged": written,
                        "vectors_stored": stored,
                        "vectors_produced": len(records),
                    },
                )

            stored += len(batch)

            if batch_index < len(starts) - 1 and delay > 0:
                await self._sleep(delay)

        self.logger.debug(
            "vectors_stored",
            document_name=document_name,
            vectors_stored=stored,
        )
        return stored

    async def get_stats(self) -> dict[str, Any]:
        """
        Get statistics about the vector store and the pipeline configuration.

        Returns:
            Store stats merged with chunking and batching settings.
        """
        try:
            store_stats = await self.store.stats()
        except Exception as e:
            self.logger.error("Failed to get pipeline statistics", error=str(e))
            raise

        stats = {
            **store_stats,
            **self.chunker.get_stats(),
            "embedding_batch_size": self.settings.embedding_batch_size,
            "upsert_batch_size": self.settings.upsert_batch_size,
        }
        self.logger.debug("Pipeline statistics retrieved", **stats)
        return stats
