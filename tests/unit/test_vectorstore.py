"""
Tests for the ChromaDB vector store.

Uses pytest for unit tests with mocked ChromaDB client, plus a few tests
against an in-memory ChromaDB instance.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest

from pdf_rag.config.settings import ChromaSettings
from pdf_rag.core.models import Fragment, IndexedVector
from pdf_rag.core.vectorstore import ChromaVectorStore, get_vectorstore
from pdf_rag.utils.exceptions import (
    DimensionMismatchError,
    StorageWriteError,
    VectorStoreConnectionError,
    VectorStoreRetrievalError,
)


@pytest.fixture
def chroma_settings() -> ChromaSettings:
    """Create test ChromaDB settings."""
    return ChromaSettings(
        host="localhost",
        port=8000,
        collection="test_collection",
        in_memory=False,
    )


def make_record(index: int, embedding: list[float], text: str = "Whales eat krill.") -> IndexedVector:
    return IndexedVector.from_fragment(
        Fragment(sequence_index=index, text=text), embedding, "whales.pdf"
    )


class TestChromaVectorStore:
    """Tests for ChromaVectorStore with a mocked client."""

    def test_initialization(self, chroma_settings: ChromaSettings) -> None:
        store = ChromaVectorStore(chroma_settings)

        assert store.settings == chroma_settings
        assert store.collection_name == "test_collection"
        assert store._client is None

    def test_collection_uses_cosine_space(
        self,
        chroma_settings: ChromaSettings,
        mock_chromadb_client: MagicMock,
    ) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        _ = store.collection

        mock_chromadb_client.get_or_create_collection.assert_called_once_with(
            name="test_collection",
            metadata={"hnsw:space": "cosine"},
            embedding_function=None,
        )

    def test_http_client_created(self, chroma_settings: ChromaSettings) -> None:
        with patch("pdf_rag.core.vectorstore.chromadb.HttpClient") as mock_http:
            store = ChromaVectorStore(chroma_settings)

            client = store.client

        mock_http.assert_called_once_with(host="localhost", port=8000)
        client.heartbeat.assert_called_once()

    def test_persistent_client_created(self) -> None:
        settings = ChromaSettings(persist_directory="/tmp/chroma-test")

        with patch("pdf_rag.core.vectorstore.chromadb.PersistentClient") as mock_persistent:
            _ = ChromaVectorStore(settings).client

        mock_persistent.assert_called_once_with(path="/tmp/chroma-test")

    def test_connection_failure(self, chroma_settings: ChromaSettings) -> None:
        with patch("pdf_rag.core.vectorstore.chromadb.HttpClient") as mock_http:
            mock_http.return_value.heartbeat.side_effect = ConnectionError("refused")
            store = ChromaVectorStore(chroma_settings)

            with pytest.raises(VectorStoreConnectionError):
                _ = store.client

    @pytest.mark.asyncio
    async def test_connect(self, chroma_settings, mock_chromadb_client) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        await store.connect()

        mock_chromadb_client.get_or_create_collection.assert_called_once()

    @pytest.mark.asyncio
    async def test_upsert(self, chroma_settings, mock_chromadb_client) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)
        records = [make_record(0, [0.1, 0.2]), make_record(1, [0.3, 0.4])]

        written = await store.upsert(records)

        assert written == 2
        collection = mock_chromadb_client.get_or_create_collection.return_value
        kwargs = collection.upsert.call_args.kwargs
        assert kwargs["ids"] == [r.id for r in records]
        assert kwargs["embeddings"] == [[0.1, 0.2], [0.3, 0.4]]
        assert kwargs["metadatas"][1]["chunk_index"] == 1
        assert kwargs["documents"][0] == "Whales eat krill."

    @pytest.mark.asyncio
    async def test_upsert_empty(self, chroma_settings, mock_chromadb_client) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        assert await store.upsert([]) == 0
        mock_chromadb_client.get_or_create_collection.assert_not_called()

    @pytest.mark.asyncio
    async def test_upsert_failure(self, chroma_settings, mock_chromadb_client) -> None:
        collection = mock_chromadb_client.get_or_create_collection.return_value
        collection.upsert.side_effect = RuntimeError("disk full")
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        with pytest.raises(StorageWriteError) as exc_info:
            await store.upsert([make_record(0, [0.1])])

        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_upsert_dimension_mismatch(self, mock_chromadb_client) -> None:
        store = ChromaVectorStore(ChromaSettings(embedding_dimension=3), client=mock_chromadb_client)

        with pytest.raises(DimensionMismatchError) as exc_info:
            await store.upsert([make_record(0, [0.1, 0.2])])

        assert exc_info.value.details["expected"] == 3
        assert exc_info.value.details["actual"] == 2
        collection = mock_chromadb_client.get_or_create_collection.return_value
        collection.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_query(self, chroma_settings, mock_chromadb_client) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        matches = await store.query([0.1, 0.2], top_k=5)

        assert [m.id for m in matches] == ["id-1", "id-2"]
        assert [m.rank for m in matches] == [0, 1]
        assert matches[0].score == pytest.approx(0.9)
        assert matches[1].score == pytest.approx(0.6)
        assert matches[0].source == "whales.pdf"
        collection = mock_chromadb_client.get_or_create_collection.return_value
        assert collection.query.call_args.kwargs["n_results"] == 2

    @pytest.mark.asyncio
    async def test_query_fills_content_from_documents(self, chroma_settings, mock_chromadb_client) -> None:
        collection = mock_chromadb_client.get_or_create_collection.return_value
        collection.query.return_value = {
            "ids": [["id-1"]],
            "documents": [["Stored text."]],
            "metadatas": [[{"source": "a.pdf"}]],
            "distances": [[0.2]],
        }
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        matches = await store.query([0.1], top_k=1)

        assert matches[0].text == "Stored text."

    @pytest.mark.asyncio
    async def test_query_empty_collection(self, chroma_settings, mock_chromadb_client) -> None:
        collection = mock_chromadb_client.get_or_create_collection.return_value
        collection.count.return_value = 0
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        assert await store.query([0.1], top_k=5) == []
        collection.query.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_failure(self, chroma_settings, mock_chromadb_client) -> None:
        collection = mock_chromadb_client.get_or_create_collection.return_value
        collection.query.side_effect = RuntimeError("timeout")
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        with pytest.raises(VectorStoreRetrievalError):
            await store.query([0.1], top_k=5)

    @pytest.mark.asyncio
    async def test_query_dimension_mismatch(self, mock_chromadb_client) -> None:
        store = ChromaVectorStore(ChromaSettings(embedding_dimension=2), client=mock_chromadb_client)

        with pytest.raises(DimensionMismatchError):
            await store.query([0.1, 0.2, 0.3], top_k=5)

    @pytest.mark.asyncio
    async def test_stats(self, chroma_settings, mock_chromadb_client) -> None:
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        stats = await store.stats()

        assert stats == {
            "collection_name": "test_collection",
            "total_vectors": 2,
            "dimension": None,
            "heartbeat": 1234567890,
        }

    @pytest.mark.asyncio
    async def test_stats_failure(self, chroma_settings, mock_chromadb_client) -> None:
        mock_chromadb_client.heartbeat.side_effect = ConnectionError("down")
        store = ChromaVectorStore(chroma_settings, client=mock_chromadb_client)

        with pytest.raises(VectorStoreConnectionError):
            await store.stats()


class TestGetVectorstore:
    """Tests for the get_vectorstore helper."""

    def test_with_settings(self, chroma_settings: ChromaSettings) -> None:
        store = get_vectorstore(chroma_settings)

        assert isinstance(store, ChromaVectorStore)
        assert store.collection_name == "test_collection"


@pytest.mark.integration
class TestInMemoryChroma:
    """Round trips through a real in-memory ChromaDB collection."""

    @pytest.fixture
    def memory_store(self) -> ChromaVectorStore:
        settings = ChromaSettings(in_memory=True, collection=f"test-{uuid.uuid4().hex[:8]}")
        return ChromaVectorStore(settings)

    @pytest.mark.asyncio
    async def test_upsert_then_query(self, memory_store: ChromaVectorStore) -> None:
        whales = make_record(0, [1.0, 0.0, 0.0], "Whales eat krill.")
        birds = make_record(1, [0.0, 1.0, 0.0], "Birds fly south.")
        await memory_store.upsert([whales, birds])

        matches = await memory_store.query([0.9, 0.1, 0.0], top_k=1)

        assert len(matches) == 1
        assert matches[0].id == whales.id
        assert matches[0].text == "Whales eat krill."
        assert matches[0].metadata["chunk_index"] == 0

    @pytest.mark.asyncio
    async def test_scores_ordered(self, memory_store: ChromaVectorStore) -> None:
        await memory_store.upsert([
            make_record(0, [1.0, 0.0]),
            make_record(1, [0.7, 0.7]),
            make_record(2, [0.0, 1.0]),
        ])

        matches = await memory_store.query([1.0, 0.0], top_k=3)

        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] == pytest.approx(1.0, abs=1e-4)

    @pytest.mark.asyncio
    async def test_empty_collection(self, memory_store: ChromaVectorStore) -> None:
        assert await memory_store.query([1.0, 0.0], top_k=5) == []
