"""Embedding provider and embedder."""

from contextual_rag.embeddings.embedder import Embedder, create_embedder
from contextual_rag.embeddings.models import EmbeddingResult
from contextual_rag.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = [
    "Embedder",
    "EmbeddingResult",
    "EmbeddingService",
    "HTTPEmbeddingService",
    "create_embedder",
]
