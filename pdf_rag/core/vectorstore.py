"""
ChromaDB vector store for the PDF question-answering engine.

This module provides the ``VectorStore`` adapter over a ChromaDB collection:
- Connection management (HTTP, persistent or in-memory client)
- Batched upserts of pre-computed embeddings with flat metadata
- Cosine similarity queries returning ``RetrievalMatch``es
- Health/stats probing
"""

import asyncio
from collections.abc import Sequence
from typing import Any

import chromadb
from chromadb.api.models.Collection import Collection

from pdf_rag.config.settings import ChromaSettings
from pdf_rag.core.models import IndexedVector, RetrievalMatch
from pdf_rag.utils.exceptions import (
    DimensionMismatchError,
    StorageWriteError,
    VectorStoreConnectionError,
    VectorStoreRetrievalError,
)
from pdf_rag.utils.logging import LoggerMixin


class ChromaVectorStore(LoggerMixin):
    """
    ``VectorStore`` implementation backed by a ChromaDB collection.

    Embeddings are computed by the caller; the collection is created with
    ``hnsw:space = cosine`` and never embeds anything itself. The synchronous
    ChromaDB client runs in worker threads so pipelines stay non-blocking.

    Example:
        >>> from pdf_rag.config.settings import get_settings
        >>> store = ChromaVectorStore(get_settings().chroma)
        >>> await store.connect()
        >>> matches = await store.query(vector, top_k=5)
    """

    def __init__(
        self,
        settings: ChromaSettings,
        client: chromadb.ClientAPI | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            settings: ChromaDB configuration settings.
            client: Optional pre-built client; created lazily from settings if None.
        """
        self.settings = settings
        self._client = client
        self._collection: Collection | None = None

        self.logger.info(
            "vector_store_initialized",
            collection=settings.collection,
            host=settings.host,
            port=settings.port,
            in_memory=settings.in_memory,
            persist_directory=settings.persist_directory,
        )

    @property
    def collection_name(self) -> str:
        """Name of the ChromaDB collection."""
        return self.settings.collection

    @property
    def client(self) -> chromadb.ClientAPI:
        """
        Get or create ChromaDB client.

        Raises:
            VectorStoreConnectionError: If unable to connect to ChromaDB.
        """
        if self._client is None:
            self._client = self._create_client()
        return self._client

    @property
    def collection(self) -> Collection:
        """Get or create the ChromaDB collection."""
        if self._collection is None:
            self._collection = self.client.get_or_create_collection(
                name=self.settings.collection,
                metadata={"hnsw:space": "cosine"},
                embedding_function=None,
            )
            self.logger.info(
                "collection_ready",
                collection=self.settings.collection,
                count=self._collection.count(),
            )
        return self._collection

    def _create_client(self) -> chromadb.ClientAPI:
        """Create ChromaDB client based on configuration."""
        try:
            if self.settings.in_memory:
                self.logger.info("creating_in_memory_client")
                return chromadb.EphemeralClient()

            if self.settings.persist_directory:
                self.logger.info(
                    "creating_persistent_client",
                    path=self.settings.persist_directory,
                )
                return chromadb.PersistentClient(path=self.settings.persist_directory)

            # HTTP client for production
            self.logger.info(
                "creating_http_client",
                host=self.settings.host,
                port=self.settings.port,
            )
            client = chromadb.HttpClient(
                host=self.settings.host,
                port=self.settings.port,
            )

            # Test connection
            client.heartbeat()
            self.logger.info("chromadb_connection_successful")
            return client

        except Exception as e:
            self.logger.error(
                "chromadb_connection_failed",
                error=str(e),
                host=self.settings.host,
                port=self.settings.port,
                exc_info=True,
            )
            raise VectorStoreConnectionError(
                f"Failed to connect to ChromaDB at {self.settings.url}",
                details={"collection": self.settings.collection},
                cause=e,
            ) from e

    def _check_dimension(self, vector: Sequence[float], record_id: str | None = None) -> None:
        """Reject vectors whose length differs from the configured dimension."""
        expected = self.settings.embedding_dimension
        if expected is not None and len(vector) != expected:
            raise DimensionMismatchError(
                f"Vector dimension {len(vector)} does not match index dimension {expected}",
                details={
                    "expected": expected,
                    "actual": len(vector),
                    "record_id": record_id,
                    "collection": self.settings.collection,
                },
            )

    async def connect(self) -> None:
        """
        Establish connection to ChromaDB.

        Forces client and collection initialization.

        Raises:
            VectorStoreConnectionError: If connection fails.
        """
        await asyncio.to_thread(lambda: self.collection)
        self.logger.info("vector_store_connected")

    async def upsert(self, records: Sequence[IndexedVector]) -> int:
        """
        Write one batch of records.

        Args:
            records: Records to write; ids are expected to be fresh.

        Returns:
            Number of records written.

        Raises:
            DimensionMismatchError: If a vector has the wrong length.
            StorageWriteError: If ChromaDB rejects the batch.
        """
        if not records:
            return 0

        for record in records:
            self._check_dimension(record.embedding, record.id)

        try:
            await asyncio.to_thread(
                self.collection.upsert,
                ids=[record.id for record in records],
                embeddings=[record.embedding for record in records],
                documents=[record.fragment_text for record in records],
                metadatas=[record.metadata() for record in records],
            )
        except VectorStoreConnectionError:
            raise
        except Exception as e:
            self.logger.error(
                "upsert_failed",
                error=str(e),
                count=len(records),
                exc_info=True,
            )
            raise StorageWriteError(
                "ChromaDB rejected the upsert batch",
                details={"collection": self.settings.collection, "batch_size": len(records)},
                cause=e,
            ) from e

        self.logger.debug("records_upserted", count=len(records))
        return len(records)

    async def query(self, vector: Sequence[float], top_k: int) -> list[RetrievalMatch]:
        """
        Return the ``top_k`` records closest to ``vector``.

        Scores are cosine similarities (``1 - distance``); matches are ordered
        best to worst as returned by ChromaDB.

        Raises:
            DimensionMismatchError: If the query vector has the wrong length.
            VectorStoreRetrievalError: If the query fails.
        """
        self._check_dimension(vector)

        try:
            count = await asyncio.to_thread(self.collection.count)
            if count == 0:
                self.logger.info("query_on_empty_collection", collection=self.collection_name)
                return []

            results = await asyncio.to_thread(
                self.collection.query,
                query_embeddings=[list(vector)],
                n_results=min(top_k, count),
                include=["documents", "metadatas", "distances"],
            )
        except VectorStoreConnectionError:
            raise
        except Exception as e:
            self.logger.error("query_failed", error=str(e), exc_info=True)
            raise VectorStoreRetrievalError(
                "ChromaDB similarity query failed",
                details={"collection": self.settings.collection, "top_k": top_k},
                cause=e,
            ) from e

        ids = (results.get("ids") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        documents = (results.get("documents") or [[]])[0]

        matches = []
        for rank, record_id in enumerate(ids):
            metadata = dict(metadatas[rank] or {}) if rank < len(metadatas) else {}
            # Fall back to the stored document when metadata lacks the text
            if not metadata.get("content") and rank < len(documents) and documents[rank]:
                metadata["content"] = documents[rank]
            distance = distances[rank] if rank < len(distances) else 1.0
            matches.append(
                RetrievalMatch(
                    id=record_id,
                    metadata=metadata,
                    score=1.0 - float(distance),
                    rank=rank,
                )
            )

        self.logger.info("query_completed", top_k=top_k, results_count=len(matches))
        return matches

    async def stats(self) -> dict[str, Any]:
        """
        Probe the collection.

        Returns:
            Collection name, record count, configured dimension and heartbeat.

        Raises:
            VectorStoreConnectionError: If ChromaDB cannot be reached.
        """
        try:
            heartbeat = await asyncio.to_thread(self.client.heartbeat)
            count = await asyncio.to_thread(self.collection.count)
        except VectorStoreConnectionError:
            raise
        except Exception as e:
            self.logger.error("stats_failed", error=str(e))
            raise VectorStoreConnectionError(
                "Failed to read ChromaDB collection stats",
                details={"collection": self.settings.collection},
                cause=e,
            ) from e

        return {
            "collection_name": self.collection_name,
            "total_vectors": count,
            "dimension": self.settings.embedding_dimension,
            "heartbeat": heartbeat,
        }


def get_vectorstore(settings: ChromaSettings | None = None) -> ChromaVectorStore:
    """
    Convenience function to get a vector store.

    Args:
        settings: Optional ChromaDB settings. If None, loads from environment.
    """
    if settings is None:
        from pdf_rag.config.settings import get_settings

        settings = get_settings().chroma

    return ChromaVectorStore(settings)
