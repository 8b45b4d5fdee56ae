"""Retrieval data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contextual_rag.config import RetrievalSettings


class SearchType(str, Enum):
    """Which retrieval paths produced a result."""

    HYBRID = "hybrid"
    VECTOR = "vector"
    FTS = "fts"


class RetrievedChunk(BaseModel):
    """A search hit annotated with per-path and fused scores.

    Attributes:
        vector_score: Vector similarity in [0, 1]; 0 if the vector path missed it.
        fts_score: Full-text score in [0, 1]; 0 if the full-text path missed it.
        combined_score: Fused, normalized relevance used for ranking.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Chunk identifier")
    source_id: str = Field(description="Source document identifier")
    source_name: str = Field(description="Source document name")
    content: str = Field(description="Chunk text")
    context: str | None = Field(default=None, description="Generated chunk context")
    vector_score: float = Field(default=0.0, description="Vector similarity score")
    fts_score: float = Field(default=0.0, description="Full-text score")
    combined_score: float = Field(default=0.0, description="Fused relevance score")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")


class RetrievalOptions(BaseModel):
    """Per-call overrides of the retrieval settings. Unset fields use the defaults."""

    top_k: int | None = Field(default=None, ge=1, description="Maximum chunks returned")
    threshold: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Minimum fused score"
    )
    vector_weight: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Vector weight in fusion"
    )
    use_hybrid_search: bool | None = Field(
        default=None, description="Combine vector and full-text search"
    )
    max_content_length: int | None = Field(
        default=None, ge=0, description="Character budget for returned content"
    )

    def resolve(self, settings: RetrievalSettings) -> RetrievalSettings:
        """Apply these overrides on top of settings."""
        overrides = self.model_dump(exclude_none=True)
        return settings.model_copy(update=overrides)


class RetrievalMetrics(BaseModel):
    """Observability snapshot of one retrieval.

    Attributes:
        candidate_count: Hits from all paths before fusion.
        fused_count: Distinct chunks after fusion.
        filtered_count: Chunks after threshold, top-k and truncation.
        avg_score: Mean combined score of the returned chunks.
        vector_search_ms: Wall-clock time of the store searches.
    """

    candidate_count: int = Field(default=0, description="Candidates before fusion")
    fused_count: int = Field(default=0, description="Chunks after fusion")
    filtered_count: int = Field(default=0, description="Chunks returned")
    avg_score: float = Field(default=0.0, description="Mean combined score")
    vector_search_ms: float | None = Field(default=None, description="Search time (ms)")


class RAGResult(BaseModel):
    """Result of one retrieval call."""

    chunks: list[RetrievedChunk] = Field(default_factory=list, description="Ranked chunks")
    query: str = Field(description="Original query")
    total_found: int = Field(description="Number of chunks returned")
    search_type: SearchType = Field(description="Retrieval paths used")
    processing_time_ms: float = Field(description="Total retrieval time (ms)")
    metrics: RetrievalMetrics | None = Field(default=None, description="Retrieval metrics")


class SourceReference(BaseModel):
    """A distinct source behind a set of retrieved chunks.

    Attributes:
        relevance: Highest combined score among the source's chunks, in percent.
    """

    id: str = Field(description="Source document identifier")
    name: str = Field(description="Source document name")
    relevance: int = Field(description="Relevance percentage")
