"""Document and chunk data models.

Chunks move through ingestion as a chain of immutable value objects:
TextChunk (chunker) -> ContextualChunk (context generator) ->
ProcessedChunk (embedder).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentMetadata(BaseModel):
    """Describes the document a chunk came from.

    Passed through unchanged to context generation. Unknown fields are kept.

    Attributes:
        name: Name or title of the source document.
        type: Kind of document (pdf, text, file, url).
        description: Optional free-text description.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(description="Name or title of the source document")
    type: str = Field(description="Kind of document (pdf, text, file, url)")
    description: str | None = Field(default=None, description="Optional description")


class TextChunk(BaseModel):
    """A passage of a document produced by the chunker.

    Attributes:
        content: Whitespace-normalized text of the chunk.
        index: 0-based position of the chunk within its document.
        start_char: Start offset into the source text.
        end_char: End offset (exclusive) into the source text.
        metadata: Open metadata map.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Chunk text")
    index: int = Field(ge=0, description="Position in the document")
    start_char: int = Field(default=0, ge=0, description="Start offset in source")
    end_char: int = Field(default=0, ge=0, description="End offset in source")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")


class ContextualChunk(TextChunk):
    """A chunk with a generated situating context.

    Attributes:
        context: Short description of the chunk within its document.
        contextual_content: ``context + "\\n\\n" + content``, the embedding input.
    """

    context: str = Field(description="Generated context")
    contextual_content: str = Field(description="Context followed by chunk content")


class ProcessedChunk(ContextualChunk):
    """A contextual chunk with its embedding, ready for persistence.

    Attributes:
        embedding: Dense vector of the contextual content.
        fts_tokens: Normalized full-text search terms.
    """

    embedding: list[float] = Field(description="Embedding vector")
    fts_tokens: str | None = Field(default=None, description="Full-text search terms")
