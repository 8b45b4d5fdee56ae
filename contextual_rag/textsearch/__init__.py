"""Full-text index and query preparation."""

from contextual_rag.textsearch.query import extract_terms
from contextual_rag.textsearch.service import QdrantTextIndex, TextIndex, term_coverage

__all__ = [
    "QdrantTextIndex",
    "TextIndex",
    "extract_terms",
    "term_coverage",
]
