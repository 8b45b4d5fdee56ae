"""Hybrid retrieval module."""

from contextual_rag.retrieval.formatting import extract_sources, format_as_context
from contextual_rag.retrieval.models import (
    RAGResult,
    RetrievalMetrics,
    RetrievalOptions,
    RetrievedChunk,
    SearchType,
    SourceReference,
)
from contextual_rag.retrieval.retriever import (
    HybridRetriever,
    create_retriever,
    reciprocal_rank_fusion,
    truncate_to_budget,
)

__all__ = [
    "HybridRetriever",
    "RAGResult",
    "RetrievalMetrics",
    "RetrievalOptions",
    "RetrievedChunk",
    "SearchType",
    "SourceReference",
    "create_retriever",
    "extract_sources",
    "format_as_context",
    "reciprocal_rank_fusion",
    "truncate_to_budget",
]
