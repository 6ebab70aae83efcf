"""
FastAPI dependency injection for engine components.

Clients for external services (vector store, embedding model, chat model) are
built once per process from the cached settings; pipelines are cheap and are
built per request around them.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from pdf_rag.chat.pipeline import QueryPipeline
from pdf_rag.config.settings import Settings, get_settings
from pdf_rag.core.embeddings import LangChainEmbedder, get_embedder
from pdf_rag.core.extractor import PdfTextExtractor
from pdf_rag.core.interfaces import Completer, Embedder, VectorStore
from pdf_rag.core.llm import ChatCompleter, get_completer
from pdf_rag.core.vectorstore import ChromaVectorStore
from pdf_rag.ingestion.chunker import TextChunker
from pdf_rag.ingestion.pipeline import IngestionPipeline
from pdf_rag.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache()
def get_vectorstore() -> ChromaVectorStore:
    """
    Get the vector store (cached singleton).

    Cached so that every request shares one ChromaDB client and, for the
    in-memory client, one collection.
    """
    settings = get_settings()
    store = ChromaVectorStore(settings.chroma)

    logger.info(
        "vectorstore_dependency_created",
        collection=settings.chroma.collection,
    )
    return store


@lru_cache()
def get_shared_embedder() -> LangChainEmbedder:
    """Get the embedder shared by ingestion and querying (cached singleton)."""
    settings = get_settings()
    embedder = get_embedder(settings)

    logger.info(
        "embedder_dependency_created",
        provider=settings.embedding.embedding_provider,
        model=settings.embedding.embedding_model,
    )
    return embedder


@lru_cache()
def get_shared_completer() -> ChatCompleter:
    """Get the chat completer (cached singleton)."""
    settings = get_settings()
    completer = get_completer(settings)

    logger.info(
        "completer_dependency_created",
        provider=settings.llm.llm_provider,
        temperature=settings.llm.llm_temperature,
    )
    return completer


def get_ingestion_pipeline(
    settings: Annotated[Settings, Depends(get_settings)],
    embedder: Annotated[Embedder, Depends(get_shared_embedder)],
    store: Annotated[VectorStore, Depends(get_vectorstore)],
) -> IngestionPipeline:
    """
    Get document ingestion pipeline instance.

    Args:
        settings: Application settings
        embedder: Shared embedder
        store: Shared vector store

    Returns:
        Initialized IngestionPipeline
    """
    return IngestionPipeline(
        extractor=PdfTextExtractor(),
        chunker=TextChunker.from_settings(settings.chunking),
        embedder=embedder,
        store=store,
        settings=settings.ingestion,
    )


def get_query_pipeline(
    settings: Annotated[Settings, Depends(get_settings)],
    embedder: Annotated[Embedder, Depends(get_shared_embedder)],
    store: Annotated[VectorStore, Depends(get_vectorstore)],
    completer: Annotated[Completer, Depends(get_shared_completer)],
) -> QueryPipeline:
    """
    Get question-answering pipeline instance.

    Args:
        settings: Application settings
        embedder: Shared embedder
        store: Shared vector store
        completer: Shared chat completer

    Returns:
        Initialized QueryPipeline
    """
    return QueryPipeline(
        embedder=embedder,
        store=store,
        completer=completer,
        top_k=settings.retrieval.retrieval_k,
    )


# Type aliases for cleaner route signatures
IngestionPipelineDep = Annotated[IngestionPipeline, Depends(get_ingestion_pipeline)]
QueryPipelineDep = Annotated[QueryPipeline, Depends(get_query_pipeline)]
VectorStoreDep = Annotated[VectorStore, Depends(get_vectorstore)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


__all__ = [
    "get_settings",
    "get_vectorstore",
    "get_shared_embedder",
    "get_shared_completer",
    "get_ingestion_pipeline",
    "get_query_pipeline",
    "IngestionPipelineDep",
    "QueryPipelineDep",
    "VectorStoreDep",
    "SettingsDep",
]
