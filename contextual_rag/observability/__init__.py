"""Observability module for metrics and monitoring."""

from contextual_rag.observability.metrics import (
    get_metrics,
    track_context_generation,
    track_embedding_request,
    track_fts_failure,
    track_llm_request,
    track_retrieval_request,
)

__all__ = [
    "get_metrics",
    "track_context_generation",
    "track_embedding_request",
    "track_fts_failure",
    "track_llm_request",
    "track_retrieval_request",
]
