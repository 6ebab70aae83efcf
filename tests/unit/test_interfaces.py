"""
Tests that adapters and stubs satisfy the capability protocols.
"""

from unittest.mock import MagicMock

from pdf_rag.config.settings import ChromaSettings
from pdf_rag.core.embeddings import LangChainEmbedder
from pdf_rag.core.extractor import PdfTextExtractor
from pdf_rag.core.interfaces import Completer, Embedder, TextExtractor, VectorStore
from pdf_rag.core.llm import ChatCompleter
from pdf_rag.core.vectorstore import ChromaVectorStore
from tests.stubs import EchoCompleter, InMemoryVectorStore, KeywordEmbedder, StubExtractor


class TestProductionAdapters:

    def test_extractor(self):
        assert isinstance(PdfTextExtractor(), TextExtractor)

    def test_embedder(self):
        assert isinstance(LangChainEmbedder(MagicMock()), Embedder)

    def test_vector_store(self):
        assert isinstance(ChromaVectorStore(ChromaSettings(), client=MagicMock()), VectorStore)

    def test_completer(self):
        assert isinstance(ChatCompleter(MagicMock()), Completer)


class TestStubs:

    def test_stubs_match_protocols(self):
        assert isinstance(StubExtractor(), TextExtractor)
        assert isinstance(KeywordEmbedder(), Embedder)
        assert isinstance(InMemoryVectorStore(), VectorStore)
        assert isinstance(EchoCompleter(), Completer)

    def test_missing_method_rejected(self):
        class NotAStore:
            async def upsert(self, records):
                return 0

        assert not isinstance(NotAStore(), VectorStore)
