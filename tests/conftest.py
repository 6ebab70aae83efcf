"""
Pytest configuration and shared fixtures.

This module provides:
- Shared fixtures for all tests
- Hypothesis profile configuration
- Test environment setup
"""

import os
from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest
from hypothesis import settings as hypothesis_settings, Verbosity

from pdf_rag.config.settings import IngestionSettings
from tests.stubs import (
    EchoCompleter,
    InMemoryVectorStore,
    KeywordEmbedder,
    RecordingSleep,
    StubExtractor,
)

# Configure Hypothesis profiles
hypothesis_settings.register_profile(
    "ci",
    max_examples=100,
    deadline=1000,
    verbosity=Verbosity.normal,
)
hypothesis_settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
    verbosity=Verbosity.verbose,
)
hypothesis_settings.register_profile(
    "debug",
    max_examples=10,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Load profile from environment or use dev
profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
hypothesis_settings.load_profile(profile)


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Fixture to set environment variables for testing."""
    env_vars = {
        "ENVIRONMENT": "development",
        "OPENAI_API_KEY": "sk-test-key",
        "LLM_MODEL": "gpt-4",
        "LLM_PROVIDER": "openai",
        "CHROMA_HOST": "localhost",
        "CHROMA_PORT": "8000",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_chromadb_client() -> MagicMock:
    """Create a mock ChromaDB client."""
    mock = MagicMock()
    mock_collection = MagicMock()
    mock_collection.count.return_value = 2
    mock_collection.upsert.return_value = None
    mock_collection.query.return_value = {
        "ids": [["id-1", "id-2"]],
        "documents": [["Whales eat krill.", "Birds fly south."]],
        "metadatas": [[
            {"content": "Whales eat krill.", "source": "whales.pdf", "page_number": 1, "chunk_index": 0},
            {"content": "Birds fly south.", "source": "birds.pdf", "page_number": 1, "chunk_index": 4},
        ]],
        "distances": [[0.1, 0.4]],
    }
    mock.get_or_create_collection.return_value = mock_collection
    mock.heartbeat.return_value = 1234567890
    return mock


@pytest.fixture
def fast_ingestion_settings() -> IngestionSettings:
    """Ingestion settings with real batching but instant backoff."""
    return IngestionSettings(
        embedding_batch_size=5,
        embedding_batch_delay=1.0,
        upsert_batch_size=100,
        upsert_batch_delay=0.0,
        embed_max_attempts=3,
        embed_initial_backoff=0.5,
        embed_max_backoff=2.0,
    )


@pytest.fixture
def stub_extractor() -> StubExtractor:
    return StubExtractor(text="This document is about whales.\n\nWhales eat krill.")


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def completer() -> EchoCompleter:
    return EchoCompleter()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Reset correlation ID between tests."""
    from pdf_rag.utils.logging import clear_correlation_id

    clear_correlation_id()
    yield
    clear_correlation_id()


# Markers for test categorization
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
