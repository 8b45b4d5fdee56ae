"""Pipeline configuration using Pydantic Settings.

All configuration is loaded from environment variables and is immutable once
built. Components receive their settings section through the constructor.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ChunkingSettings(BaseSettings):
    """Semantic chunker configuration.

    Sizes are expressed in estimated tokens (characters / chars_per_token).
    """

    model_config = SettingsConfigDict(env_prefix="CHUNKING_", frozen=True)

    chunk_size: int = Field(
        default=400,
        ge=1,
        description="Target chunk size in tokens",
    )
    overlap: int = Field(
        default=50,
        ge=0,
        description="Overlap between consecutive chunks in tokens",
    )
    min_chunk_size: int = Field(
        default=50,
        ge=0,
        description="Trailing chunks below this size are merged into the previous one",
    )
    chars_per_token: int = Field(
        default=4,
        ge=1,
        description="Characters per token for size estimation",
    )


class ContextSettings(BaseSettings):
    """Chunk context generation configuration."""

    model_config = SettingsConfigDict(env_prefix="CONTEXT_", frozen=True)

    max_context_tokens: int = Field(
        default=100,
        ge=1,
        description="Maximum tokens for a generated context",
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        description="Sampling temperature (lower = more focused)",
    )
    batch_size: int = Field(
        default=5,
        ge=1,
        description="Chunks processed concurrently per batch",
    )
    batch_delay: float = Field(
        default=0.1,
        ge=0.0,
        description="Delay between batches in seconds",
    )
    max_document_chars: int = Field(
        default=8000,
        ge=1,
        description="Full-document context is truncated to this many characters",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_", frozen=True)

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible embedding API base URL",
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name",
    )
    api_key: SecretStr = Field(
        default=SecretStr("not-required"),
        description="API key (not required for local servers)",
    )
    dimensions: int | None = Field(
        default=1536,
        description="Expected vector length; None disables the check",
    )
    batch_size: int = Field(
        default=20,
        ge=1,
        description="Texts per embedding request",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts per embedding request before giving up",
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Back-off base in seconds (doubles each attempt)",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class RetrievalSettings(BaseSettings):
    """Hybrid retrieval defaults. Every field can be overridden per call."""

    model_config = SettingsConfigDict(env_prefix="RETRIEVAL_", frozen=True)

    top_k: int = Field(default=5, ge=1, description="Maximum chunks returned")
    threshold: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Minimum fused score",
    )
    vector_weight: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Vector weight in fusion; full-text gets 1 - vector_weight",
    )
    use_hybrid_search: bool = Field(
        default=True,
        description="Combine vector and full-text search",
    )
    max_content_length: int = Field(
        default=8000,
        ge=0,
        description="Character budget for returned chunk content",
    )
    candidate_multiplier: int = Field(
        default=5,
        ge=1,
        description="Candidates fetched per source = top_k * multiplier",
    )
    rrf_k: int = Field(
        default=60,
        ge=1,
        description="Reciprocal Rank Fusion constant",
    )


class LLMSettings(BaseSettings):
    """LLM service configuration.

    Any OpenAI-compatible chat completions API works (OpenAI, Ollama, vLLM).
    """

    model_config = SettingsConfigDict(env_prefix="LLM_", frozen=True)

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="LLM API base URL",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model name used for context generation",
    )
    api_key: SecretStr = Field(
        default=SecretStr("not-required"),
        description="API key (not required for local servers)",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )
    max_tokens: int = Field(
        default=512,
        description="Maximum tokens in response",
    )
    temperature: float = Field(
        default=0.3,
        description="Sampling temperature",
    )


class QdrantSettings(BaseSettings):
    """Qdrant configuration for the vector and full-text indexes."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_", frozen=True)

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="knowledge_chunks",
        description="Collection holding processed chunks",
    )
    tenant_field: str = Field(
        default="tenant_id",
        description="Payload field used to scope searches to a tenant",
    )
    text_scan_limit: int = Field(
        default=200,
        ge=1,
        description="Points scanned per full-text query before ranking",
    )


class Settings(BaseSettings):
    """Main settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Nested settings
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
