"""Contextual retrieval: situating each chunk within its document.

A chunk on its own often lacks the information needed to match queries
about its document. The generator asks an LLM for a 2-3 sentence context and
prepends it to the chunk; the combined text is what gets embedded.

Generation is best-effort per chunk. Any failure yields a deterministic
fallback context built from the document metadata, so ingestion always
completes.
"""

import asyncio
from collections.abc import Callable

from contextual_rag.config import ContextSettings, get_settings
from contextual_rag.context.prompts import ChunkContextPrompt, FullDocumentContextPrompt
from contextual_rag.documents.models import ContextualChunk, DocumentMetadata, TextChunk
from contextual_rag.exceptions import ErrorCode, LLMError
from contextual_rag.llm.client import LLMClient
from contextual_rag.logging_config import get_logger
from contextual_rag.observability.metrics import track_context_generation

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


def fallback_context(document_metadata: DocumentMetadata) -> str:
    """Context used when generation fails or is skipped."""
    return f"From {document_metadata.name} ({document_metadata.type})."


def combine_context(context: str, content: str) -> str:
    """Build the embedding input from a context and chunk content."""
    return f"{context}\n\n{content}"


def _with_context(chunk: TextChunk, context: str) -> ContextualChunk:
    return ContextualChunk(
        **chunk.model_dump(),
        context=context,
        contextual_content=combine_context(context, chunk.content),
    )


class ContextGenerator:
    """Adds LLM-generated context to chunks."""

    def __init__(
        self,
        llm_client: LLMClient,
        settings: ContextSettings | None = None,
        chunk_prompt: ChunkContextPrompt | None = None,
        document_prompt: FullDocumentContextPrompt | None = None,
    ) -> None:
        """Initialize the context generator.

        Args:
            llm_client: Client used to complete context prompts.
            settings: Context configuration. Uses defaults if not provided.
            chunk_prompt: Prompt for metadata-only generation.
            document_prompt: Prompt for full-document generation.
        """
        self._llm_client = llm_client
        self._settings = settings or get_settings().context
        self._chunk_prompt = chunk_prompt or ChunkContextPrompt()
        self._document_prompt = document_prompt or FullDocumentContextPrompt()

    async def _complete(self, prompt: str) -> str:
        context = await self._llm_client.complete(
            prompt,
            max_tokens=self._settings.max_context_tokens,
            temperature=self._settings.temperature,
        )
        if not context:
            raise LLMError("LLM returned an empty context", code=ErrorCode.LLM_EMPTY_RESPONSE)
        return context

    def fallback_for_chunk(
        self,
        chunk: TextChunk,
        document_metadata: DocumentMetadata,
    ) -> ContextualChunk:
        """Attach the metadata fallback context without calling the LLM."""
        return _with_context(chunk, fallback_context(document_metadata))

    async def generate_for_chunk(
        self,
        chunk: TextChunk,
        document_metadata: DocumentMetadata,
    ) -> ContextualChunk:
        """Generate context for a single chunk.

        Args:
            chunk: Chunk to situate.
            document_metadata: Title and type of the source document.

        Returns:
            Contextual chunk; carries the fallback context if generation failed.
        """
        prompt = self._chunk_prompt.format(
            title=document_metadata.name,
            document_type=document_metadata.type,
            chunk=chunk.content,
        )

        try:
            context = await self._complete(prompt)
        except Exception as e:
            logger.warning(
                f"Context generation failed for chunk {chunk.index}: {e}",
                extra={"chunk_index": chunk.index, "document": document_metadata.name},
            )
            track_context_generation(fallback=True)
            return self.fallback_for_chunk(chunk, document_metadata)

        track_context_generation(fallback=False)
        return _with_context(chunk, context)

    async def generate_for_chunks(
        self,
        chunks: list[TextChunk],
        document_metadata: DocumentMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> list[ContextualChunk]:
        """Generate context for many chunks in rate-limited batches.

        Chunks within a batch are processed concurrently; batches run one
        after another with a short delay in between.

        Args:
            chunks: Chunks to situate.
            document_metadata: Title and type of the source document.
            on_progress: Called with (completed, total) after each batch.

        Returns:
            Contextual chunks in input order.
        """
        results: list[ContextualChunk] = []
        total = len(chunks)
        batch_size = self._settings.batch_size

        for i in range(0, total, batch_size):
            batch = chunks[i : i + batch_size]
            batch_results = await asyncio.gather(
                *(self.generate_for_chunk(chunk, document_metadata) for chunk in batch)
            )
            results.extend(batch_results)

            if on_progress is not None:
                on_progress(min(i + batch_size, total), total)

            if i + batch_size < total and self._settings.batch_delay > 0:
                await asyncio.sleep(self._settings.batch_delay)

        return results

    async def generate_with_full_document(
        self,
        chunk: TextChunk,
        full_document: str,
        document_metadata: DocumentMetadata,
    ) -> ContextualChunk:
        """Generate context using the full document text.

        Higher quality but more expensive than the metadata-only path. The
        document is truncated to ``max_document_chars``. Falls back to
        ``generate_for_chunk`` on failure.
        """
        limit = self._settings.max_document_chars
        document = (
            full_document[:limit] + "..." if len(full_document) > limit else full_document
        )
        prompt = self._document_prompt.format(document=document, chunk=chunk.content)

        try:
            context = await self._complete(prompt)
        except Exception as e:
            logger.warning(
                f"Full document context generation failed for chunk {chunk.index}: {e}",
                extra={"chunk_index": chunk.index, "document": document_metadata.name},
            )
            return await self.generate_for_chunk(chunk, document_metadata)

        track_context_generation(fallback=False)
        return _with_context(chunk, context)


def create_context_generator(
    llm_client: LLMClient,
    settings: ContextSettings | None = None,
) -> ContextGenerator:
    """Create a context generator with the given or default settings."""
    return ContextGenerator(llm_client, settings)
