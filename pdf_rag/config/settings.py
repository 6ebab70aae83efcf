"""
Configuration settings for the PDF question-answering engine.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files with validation and type safety. A single Settings
instance is built at process start and passed into factories and pipelines.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Chat-completion provider configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    llm_model: str = Field(
        default="gpt-3.5-turbo",
        description="Chat model name",
    )
    llm_provider: Literal["openai", "ollama"] = Field(
        default="openai",
        description="LLM provider",
    )
    llm_temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; low values favour literal extraction",
    )
    llm_max_tokens: int = Field(
        default=1024,
        ge=1,
        le=128000,
        description="Maximum tokens in response",
    )

    # Ollama settings
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama base URL",
    )
    ollama_model: str = Field(
        default="llama3",
        description="Ollama model name",
    )

    @field_validator("llm_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Ensure temperature is within valid range."""
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v


class EmbeddingSettings(BaseSettings):
    """Embedding model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model name",
    )
    embedding_provider: Literal["openai", "huggingface", "ollama"] = Field(
        default="openai",
        description="Embedding provider",
    )
    huggingface_embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="HuggingFace embedding model",
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama base URL for embeddings",
    )


class ChromaSettings(BaseSettings):
    """ChromaDB vector index configuration."""

    model_config = SettingsConfigDict(env_prefix="CHROMA_")

    host: str = Field(
        default="localhost",
        description="ChromaDB host",
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="ChromaDB port",
    )
    collection: str = Field(
        default="pdf-documents",
        description="ChromaDB collection name",
    )
    persist_directory: Optional[str] = Field(
        default=None,
        description="Use an embedded persistent client rooted here instead of HTTP",
    )
    in_memory: bool = Field(
        default=False,
        description="Use in-memory ChromaDB",
    )
    embedding_dimension: Optional[int] = Field(
        default=None,
        ge=1,
        description="Expected vector dimension; enforced on upsert and query when set",
    )

    @property
    def url(self) -> str:
        """Get ChromaDB URL."""
        return f"http://{self.host}:{self.port}"


class ChunkingSettings(BaseSettings):
    """Document chunking configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    chunk_size: int = Field(
        default=1000,
        ge=50,
        le=10000,
        description="Target fragment size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        le=1000,
        description="Overlap between consecutive fragments in characters",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Maximum upload size in MB",
    )

    @model_validator(mode="after")
    def validate_overlap_less_than_size(self) -> "ChunkingSettings":
        """Ensure overlap is less than chunk size."""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be less than chunk_size")
        return self

    @property
    def max_file_size_bytes(self) -> int:
        """Upload cap in bytes."""
        return self.max_file_size_mb * 1024 * 1024


class IngestionSettings(BaseSettings):
    """Batching, pacing and retry configuration for the ingestion pipeline."""

    model_config = SettingsConfigDict(env_prefix="INGEST_")

    embedding_batch_size: int = Field(
        default=5,
        ge=1,
        le=512,
        description="Fragments embedded per batch",
    )
    embedding_batch_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause in seconds between embedding batches",
    )
    upsert_batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Vectors written per upsert call",
    )
    upsert_batch_delay: float = Field(
        default=0.0,
        ge=0.0,
        le=60.0,
        description="Pause in seconds between upsert batches",
    )
    max_stored_text_chars: int = Field(
        default=8000,
        ge=100,
        description="Fragment text stored next to each vector is truncated to this length",
    )
    embed_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per fragment embedding before it is skipped",
    )
    embed_initial_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="First retry wait in seconds",
    )
    embed_max_backoff: float = Field(
        default=10.0,
        ge=0.0,
        description="Upper bound for a single retry wait in seconds",
    )

    @model_validator(mode="after")
    def validate_backoff_bounds(self) -> "IngestionSettings":
        """Ensure the backoff ceiling is not below the first wait."""
        if self.embed_max_backoff < self.embed_initial_backoff:
            raise ValueError("embed_max_backoff must be >= embed_initial_backoff")
        return self


class RetrievalSettings(BaseSettings):
    """Retrieval configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    retrieval_k: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of fragments retrieved per question",
    )


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="API server port",
    )
    host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    cors_enabled: bool = Field(
        default=True,
        alias="CORS_ENABLED",
        description="Enable CORS",
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8080",
        alias="CORS_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log format",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="pdf-rag",
        description="Application name",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    chroma: ChromaSettings = Field(default_factory=ChromaSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="after")
    def validate_api_key_for_openai(self) -> "Settings":
        """Ensure an OpenAI API key is provided when an OpenAI provider is used in production."""
        uses_openai = (
            self.llm.llm_provider == "openai"
            or self.embedding.embedding_provider == "openai"
        )
        if uses_openai and not self.llm.openai_api_key.get_secret_value():
            if self.environment == "production":
                raise ValueError(
                    "OPENAI_API_KEY is required when using OpenAI provider in production"
                )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug mode is enabled."""
        return self.logging.debug or self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached after first load. Call `get_settings.cache_clear()`
        to reload settings from environment.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload settings from environment.

    Returns:
        Settings: Fresh application settings instance.
    """
    get_settings.cache_clear()
    return get_settings()
