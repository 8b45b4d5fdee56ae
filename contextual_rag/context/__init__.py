"""Chunk context generation."""

from contextual_rag.context.generator import (
    ContextGenerator,
    combine_context,
    create_context_generator,
    fallback_context,
)
from contextual_rag.context.prompts import (
    ChunkContextPrompt,
    FullDocumentContextPrompt,
    PromptTemplate,
)

__all__ = [
    "ChunkContextPrompt",
    "ContextGenerator",
    "FullDocumentContextPrompt",
    "PromptTemplate",
    "combine_context",
    "create_context_generator",
    "fallback_context",
]
