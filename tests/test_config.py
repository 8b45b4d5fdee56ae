"""Tests for pipeline configuration."""

import os
from unittest.mock import patch

import pytest

from contextual_rag.config import (
    ChunkingSettings,
    ContextSettings,
    EmbeddingSettings,
    Environment,
    LLMSettings,
    QdrantSettings,
    RetrievalSettings,
    Settings,
    get_settings,
)


class TestChunkingSettings:
    """Tests for chunking configuration."""

    def test_default_values(self) -> None:
        """Defaults target 400-token chunks with 50 tokens of overlap."""
        settings = ChunkingSettings()
        assert settings.chunk_size == 400
        assert settings.overlap == 50
        assert settings.min_chunk_size == 50
        assert settings.chars_per_token == 4

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"CHUNKING_CHUNK_SIZE": "200"}):
            assert ChunkingSettings().chunk_size == 200

    def test_frozen(self) -> None:
        """Settings are immutable once built."""
        settings = ChunkingSettings()
        with pytest.raises(ValueError):
            settings.chunk_size = 10  # type: ignore[misc]

    def test_rejects_non_positive_size(self) -> None:
        """Chunk size must be positive."""
        with pytest.raises(ValueError):
            ChunkingSettings(chunk_size=0)


class TestContextSettings:
    """Tests for context generation configuration."""

    def test_default_values(self) -> None:
        """Default batching and prompt limits."""
        settings = ContextSettings()
        assert settings.max_context_tokens == 100
        assert settings.temperature == 0.3
        assert settings.batch_size == 5
        assert settings.batch_delay == 0.1
        assert settings.max_document_chars == 8000


class TestEmbeddingSettings:
    """Tests for embedding configuration."""

    def test_default_values(self) -> None:
        """Default values for embedding service."""
        settings = EmbeddingSettings()
        assert settings.model == "text-embedding-3-small"
        assert settings.dimensions == 1536
        assert settings.batch_size == 20
        assert settings.max_retries == 3
        assert settings.retry_base_delay == 1.0

    def test_api_key_is_secret(self) -> None:
        """API key should be masked when printed."""
        settings = EmbeddingSettings()
        assert "not-required" not in str(settings.api_key)
        assert settings.api_key.get_secret_value() == "not-required"

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"EMBEDDING_BATCH_SIZE": "64"}):
            assert EmbeddingSettings().batch_size == 64


class TestRetrievalSettings:
    """Tests for retrieval configuration."""

    def test_default_values(self) -> None:
        """Default retrieval tunables."""
        settings = RetrievalSettings()
        assert settings.top_k == 5
        assert settings.threshold == 0.15
        assert settings.vector_weight == 0.7
        assert settings.use_hybrid_search is True
        assert settings.max_content_length == 8000
        assert settings.candidate_multiplier == 5
        assert settings.rrf_k == 60

    def test_weight_bounds(self) -> None:
        """Vector weight must be within [0, 1]."""
        with pytest.raises(ValueError):
            RetrievalSettings(vector_weight=1.5)

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"RETRIEVAL_USE_HYBRID_SEARCH": "false"}):
            assert RetrievalSettings().use_hybrid_search is False


class TestLLMSettings:
    """Tests for LLM configuration."""

    def test_default_values(self) -> None:
        """Default values point to an OpenAI-compatible API."""
        settings = LLMSettings()
        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.model == "gpt-4o-mini"

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"LLM_MODEL": "llama3:8b"}):
            assert LLMSettings().model == "llama3:8b"


class TestQdrantSettings:
    """Tests for Qdrant configuration."""

    def test_default_values(self) -> None:
        """Default values for Qdrant."""
        settings = QdrantSettings()
        assert settings.url == "http://localhost:6333"
        assert settings.api_key is None
        assert settings.collection_name == "knowledge_chunks"
        assert settings.tenant_field == "tenant_id"

    def test_api_key_is_secret_when_set(self) -> None:
        """API key should be masked when set."""
        with patch.dict(os.environ, {"QDRANT_API_KEY": "secret-key"}):
            settings = QdrantSettings()
            assert settings.api_key is not None
            assert "secret-key" not in str(settings.api_key)
            assert settings.api_key.get_secret_value() == "secret-key"


class TestSettings:
    """Tests for main settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        assert Settings().environment == Environment.DEVELOPMENT

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.chunking, ChunkingSettings)
        assert isinstance(settings.context, ContextSettings)
        assert isinstance(settings.embedding, EmbeddingSettings)
        assert isinstance(settings.retrieval, RetrievalSettings)
        assert isinstance(settings.llm, LLMSettings)
        assert isinstance(settings.qdrant, QdrantSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            assert Settings().environment == Environment.PRODUCTION


class TestGetSettings:
    """Tests for settings singleton."""

    def test_returns_settings_instance(self) -> None:
        """get_settings returns a Settings instance."""
        get_settings.cache_clear()
        assert isinstance(get_settings(), Settings)

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()
