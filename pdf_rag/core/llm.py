"""
Chat-completion providers.

``LLMFactory`` builds a LangChain chat model for the configured provider
(OpenAI, Ollama); ``ChatCompleter`` adapts it to the ``Completer`` capability.
"""

from collections.abc import Sequence
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from pdf_rag.config.settings import LLMSettings, Settings
from pdf_rag.utils.exceptions import CompletionError
from pdf_rag.utils.logging import LoggerMixin, get_logger

logger = get_logger(__name__)


class LLMFactory(LoggerMixin):
    """Factory class for creating LLM instances."""

    @staticmethod
    def create(settings: LLMSettings) -> BaseChatModel:
        """
        Create an LLM instance based on provider settings.

        Args:
            settings: LLM configuration settings.

        Returns:
            A LangChain BaseChatModel instance.

        Raises:
            ValueError: If provider is not supported.
        """
        logger.info(
            "creating_llm",
            provider=settings.llm_provider,
            model=settings.llm_model,
        )

        if settings.llm_provider == "openai":
            return LLMFactory.create_openai(
                api_key=settings.openai_api_key.get_secret_value(),
                model=settings.llm_model,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
            )
        elif settings.llm_provider == "ollama":
            return LLMFactory.create_ollama(
                base_url=settings.ollama_base_url,
                model=settings.ollama_model,
                temperature=settings.llm_temperature,
            )
        else:
            raise ValueError(
                f"Unsupported LLM provider: {settings.llm_provider}. "
                f"Supported providers: openai, ollama"
            )

    @staticmethod
    def create_openai(
        api_key: str,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.1,
        max_tokens: int = 1024,
        **kwargs: Any,
    ) -> ChatOpenAI:
        """
        Create an OpenAI chat model instance.

        Args:
            api_key: OpenAI API key.
            model: Model name (e.g., 'gpt-4', 'gpt-3.5-turbo').
            temperature: Sampling temperature (0.0 to 2.0).
            max_tokens: Maximum tokens in response.
            **kwargs: Additional arguments passed to ChatOpenAI.

        Returns:
            ChatOpenAI instance.
        """
        logger.info(
            "creating_openai_llm",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return ChatOpenAI(
            api_key=api_key,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    @staticmethod
    def create_ollama(
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        temperature: float = 0.1,
        **kwargs: Any,
    ) -> BaseChatModel:
        """
        Create an Ollama chat model instance.

        Requires the ``ollama`` extra.
        """
        try:
            from langchain_ollama import ChatOllama
        except ImportError as e:
            raise ImportError(
                "langchain-ollama is not installed. "
                "Install it with: pip install 'pdf-rag[ollama]'"
            ) from e

        logger.info(
            "creating_ollama_llm",
            base_url=base_url,
            model=model,
            temperature=temperature,
        )

        return ChatOllama(
            base_url=base_url,
            model=model,
            temperature=temperature,
            **kwargs,
        )


def _message_text(message: BaseMessage) -> str:
    """Flatten a chat message's content to plain text."""
    content = message.content
    if isinstance(content, str):
        return content
    # Multi-part content: keep the text parts only
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class ChatCompleter(LoggerMixin):
    """
    ``Completer`` backed by a LangChain chat model.

    The system instruction becomes a ``SystemMessage`` and each entry of
    ``messages`` a ``HumanMessage``. Sampling temperature is whatever the
    wrapped model was created with.
    """

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    async def complete(self, system_instruction: str, messages: Sequence[str]) -> str:
        """
        Run one chat completion.

        Returns:
            The reply text, or an empty string when the model produced no content.

        Raises:
            CompletionError: If the provider call fails.
        """
        prompt: list[BaseMessage] = [SystemMessage(content=system_instruction)]
        prompt.extend(HumanMessage(content=message) for message in messages)

        try:
            reply = await self.llm.ainvoke(prompt)
        except Exception as e:
            self.logger.error("completion_failed", error=str(e), exc_info=True)
            raise CompletionError(
                "Chat completion call failed",
                details={"error": str(e)},
                cause=e,
            ) from e

        if reply is None:
            return ""
        return _message_text(reply)


def get_llm(settings: Settings | LLMSettings | None = None) -> BaseChatModel:
    """
    Convenience function to get an LLM instance.

    Args:
        settings: Full application settings or just the LLM section.
            If None, loads from environment.

    Returns:
        A LangChain BaseChatModel instance.
    """
    if settings is None:
        from pdf_rag.config.settings import get_settings

        settings = get_settings()

    if isinstance(settings, Settings):
        settings = settings.llm

    return LLMFactory.create(settings)


def get_completer(settings: Settings | LLMSettings | None = None) -> ChatCompleter:
    """Build the ``Completer`` used by the query pipeline."""
    return ChatCompleter(get_llm(settings))
