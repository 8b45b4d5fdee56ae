"""Vector-similarity index."""

from contextual_rag.vectorstore.models import SearchHit
from contextual_rag.vectorstore.service import QdrantVectorIndex, VectorIndex

__all__ = [
    "QdrantVectorIndex",
    "SearchHit",
    "VectorIndex",
]
