"""Document models and chunking."""

from contextual_rag.documents.chunker import (
    SemanticChunker,
    create_chunker,
    estimate_tokens,
    split_paragraphs,
    split_sentences,
)
from contextual_rag.documents.models import (
    ContextualChunk,
    DocumentMetadata,
    ProcessedChunk,
    TextChunk,
)

__all__ = [
    "ContextualChunk",
    "DocumentMetadata",
    "ProcessedChunk",
    "SemanticChunker",
    "TextChunk",
    "create_chunker",
    "estimate_tokens",
    "split_paragraphs",
    "split_sentences",
]
