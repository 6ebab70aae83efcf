"""
Embedding providers.

``EmbeddingsFactory`` builds a LangChain ``Embeddings`` for the configured
provider (OpenAI, HuggingFace, Ollama); ``LangChainEmbedder`` adapts it to the
single-text ``Embedder`` capability the pipelines use.
"""

from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings

from pdf_rag.config.settings import EmbeddingSettings, Settings
from pdf_rag.utils.exceptions import EmbeddingGenerationError
from pdf_rag.utils.logging import LoggerMixin, get_logger

logger = get_logger(__name__)


class EmbeddingsFactory(LoggerMixin):
    """Factory class for creating embedding model instances."""

    @staticmethod
    def create(settings: EmbeddingSettings, api_key: str | None = None) -> Embeddings:
        """
        Create an embeddings instance based on provider settings.

        Args:
            settings: Embedding configuration settings.
            api_key: Optional API key (required for OpenAI).

        Returns:
            A LangChain Embeddings instance.

        Raises:
            ValueError: If provider is not supported or required params are missing.
        """
        logger.info(
            "creating_embeddings",
            provider=settings.embedding_provider,
            model=settings.embedding_model,
        )

        if settings.embedding_provider == "openai":
            if not api_key:
                raise ValueError("OpenAI API key is required for OpenAI embeddings")
            return EmbeddingsFactory.create_openai(
                api_key=api_key,
                model=settings.embedding_model,
            )
        elif settings.embedding_provider == "huggingface":
            return EmbeddingsFactory.create_huggingface(
                model_name=settings.huggingface_embedding_model,
            )
        elif settings.embedding_provider == "ollama":
            return EmbeddingsFactory.create_ollama(
                model=settings.embedding_model,
                base_url=settings.ollama_base_url,
            )
        else:
            raise ValueError(
                f"Unsupported embedding provider: {settings.embedding_provider}. "
                f"Supported providers: openai, huggingface, ollama"
            )

    @staticmethod
    def create_openai(
        api_key: str,
        model: str = "text-embedding-ada-002",
        **kwargs: Any,
    ) -> OpenAIEmbeddings:
        """Create an OpenAI embeddings instance."""
        logger.info("creating_openai_embeddings", model=model)

        return OpenAIEmbeddings(
            api_key=api_key,
            model=model,
            **kwargs,
        )

    @staticmethod
    def create_huggingface(
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        **kwargs: Any,
    ) -> Embeddings:
        """
        Create a local HuggingFace embeddings instance.

        Requires the ``huggingface`` extra.
        """
        try:
            from langchain_huggingface import HuggingFaceEmbeddings
        except ImportError as e:
            raise ImportError(
                "langchain-huggingface is not installed. "
                "Install it with: pip install 'pdf-rag[huggingface]'"
            ) from e

        logger.info("creating_huggingface_embeddings", model_name=model_name)

        return HuggingFaceEmbeddings(
            model_name=model_name,
            **kwargs,
        )

    @staticmethod
    def create_ollama(
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        **kwargs: Any,
    ) -> Embeddings:
        """
        Create an Ollama embeddings instance.

        Requires the ``ollama`` extra.
        """
        try:
            from langchain_ollama import OllamaEmbeddings
        except ImportError as e:
            raise ImportError(
                "langchain-ollama is not installed. "
                "Install it with: pip install 'pdf-rag[ollama]'"
            ) from e

        logger.info(
            "creating_ollama_embeddings",
            model=model,
            base_url=base_url,
        )

        return OllamaEmbeddings(
            model=model,
            base_url=base_url,
            **kwargs,
        )


class LangChainEmbedder(LoggerMixin):
    """
    ``Embedder`` backed by a LangChain ``Embeddings`` model.

    Every call embeds exactly one text through ``aembed_query``. Provider
    failures and empty vectors both surface as ``EmbeddingGenerationError``
    so callers can treat them uniformly.
    """

    def __init__(self, embeddings: Embeddings) -> None:
        self.embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        try:
            vector = await self.embeddings.aembed_query(text)
        except Exception as e:
            raise EmbeddingGenerationError(
                "Embedding provider call failed",
                details={"text_length": len(text), "error": str(e)},
                cause=e,
            ) from e

        if not vector:
            raise EmbeddingGenerationError(
                "Embedding provider returned an empty vector",
                details={"text_length": len(text)},
            )
        return list(vector)


def get_embeddings(
    settings: Settings | EmbeddingSettings | None = None,
    api_key: str | None = None,
) -> Embeddings:
    """
    Convenience function to get an embeddings instance.

    Args:
        settings: Full application settings or just the embedding section.
            If None, loads from environment.
        api_key: Optional API key for providers that require it. Taken from
            the LLM section when full settings are passed.

    Returns:
        A LangChain Embeddings instance.
    """
    if settings is None:
        from pdf_rag.config.settings import get_settings

        settings = get_settings()

    if isinstance(settings, Settings):
        full_settings = settings
        settings = full_settings.embedding
        # OpenAI embeddings share the chat model's key
        if settings.embedding_provider == "openai" and not api_key:
            api_key = full_settings.llm.openai_api_key.get_secret_value()

    return EmbeddingsFactory.create(settings, api_key=api_key)


def get_embedder(settings: Settings | None = None) -> LangChainEmbedder:
    """Build the ``Embedder`` used by both pipelines."""
    return LangChainEmbedder(get_embeddings(settings))
