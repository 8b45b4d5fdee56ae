"""Ingestion pipeline orchestrator.

Runs one document through the chunker, the context generator and the
embedder, reporting progress per stage. The resulting processed chunks are
returned to the caller for persistence.
"""

from collections.abc import Callable
from enum import Enum

from contextual_rag.config import Settings, get_settings
from contextual_rag.context.generator import ContextGenerator
from contextual_rag.documents.chunker import SemanticChunker
from contextual_rag.documents.models import (
    ContextualChunk,
    DocumentMetadata,
    ProcessedChunk,
    TextChunk,
)
from contextual_rag.embeddings.embedder import Embedder
from contextual_rag.embeddings.service import EmbeddingService, HTTPEmbeddingService
from contextual_rag.llm.client import LLMClient, OpenAICompatibleClient
from contextual_rag.logging_config import get_logger

logger = get_logger(__name__)


class PipelineStage(str, Enum):
    """Ingestion stage reported to progress callbacks."""

    CHUNKING = "chunking"
    CONTEXT = "context"
    EMBEDDING = "embedding"


ProgressCallback = Callable[[PipelineStage, int, int], None]


class ProcessingPipeline:
    """Orchestrates chunking, context generation and embedding."""

    def __init__(
        self,
        chunker: SemanticChunker,
        context_generator: ContextGenerator,
        embedder: Embedder,
        skip_context: bool = False,
    ) -> None:
        """Initialize the pipeline.

        Args:
            chunker: Splits documents into chunks.
            context_generator: Adds situating context to chunks.
            embedder: Embeds contextual chunks.
            skip_context: Use the metadata fallback context instead of the LLM.
        """
        self._chunker = chunker
        self._context_generator = context_generator
        self._embedder = embedder
        self._skip_context = skip_context

    def _chunk(
        self,
        text: str,
        document_metadata: DocumentMetadata,
        on_progress: ProgressCallback | None,
    ) -> list[TextChunk]:
        _report(on_progress, PipelineStage.CHUNKING, 0, 1)
        chunks = self._chunker.chunk(text)
        _report(on_progress, PipelineStage.CHUNKING, 1, 1)

        logger.info(
            f"Chunked document into {len(chunks)} chunks",
            extra={"document": document_metadata.name, "text_length": len(text)},
        )
        return chunks

    async def _embed(
        self,
        chunks: list[ContextualChunk],
        document_metadata: DocumentMetadata,
        on_progress: ProgressCallback | None,
    ) -> list[ProcessedChunk]:
        processed = await self._embedder.embed_chunks(
            chunks,
            lambda completed, total: _report(
                on_progress, PipelineStage.EMBEDDING, completed, total
            ),
        )
        logger.info(
            "Document processed",
            extra={"document": document_metadata.name, "chunks": len(processed)},
        )
        return processed

    async def process(
        self,
        text: str,
        document_metadata: DocumentMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> list[ProcessedChunk]:
        """Process a document through the full pipeline.

        Args:
            text: Raw document text.
            document_metadata: Name and type of the document.
            on_progress: Called with (stage, completed, total).

        Returns:
            Processed chunks in document order; empty for empty input.

        Raises:
            Exception: The embedding provider error once retries are exhausted.
        """
        chunks = self._chunk(text, document_metadata, on_progress)
        if not chunks:
            return []

        if self._skip_context:
            contextual_chunks = [
                self._context_generator.fallback_for_chunk(chunk, document_metadata)
                for chunk in chunks
            ]
            _report(on_progress, PipelineStage.CONTEXT, len(chunks), len(chunks))
        else:
            contextual_chunks = await self._context_generator.generate_for_chunks(
                chunks,
                document_metadata,
                lambda completed, total: _report(
                    on_progress, PipelineStage.CONTEXT, completed, total
                ),
            )

        return await self._embed(contextual_chunks, document_metadata, on_progress)

    async def process_with_full_context(
        self,
        text: str,
        document_metadata: DocumentMetadata,
        on_progress: ProgressCallback | None = None,
    ) -> list[ProcessedChunk]:
        """Process a document, generating each context from the full text.

        Higher quality but more expensive than ``process``; chunks are
        situated one at a time.
        """
        chunks = self._chunk(text, document_metadata, on_progress)
        if not chunks:
            return []

        contextual_chunks: list[ContextualChunk] = []
        for position, chunk in enumerate(chunks, start=1):
            contextual_chunks.append(
                await self._context_generator.generate_with_full_document(
                    chunk, text, document_metadata
                )
            )
            _report(on_progress, PipelineStage.CONTEXT, position, len(chunks))

        return await self._embed(contextual_chunks, document_metadata, on_progress)


def _report(
    on_progress: ProgressCallback | None,
    stage: PipelineStage,
    completed: int,
    total: int,
) -> None:
    if on_progress is not None:
        on_progress(stage, completed, total)


def create_processing_pipeline(
    settings: Settings | None = None,
    llm_client: LLMClient | None = None,
    embedding_service: EmbeddingService | None = None,
    skip_context: bool = False,
) -> ProcessingPipeline:
    """Wire a pipeline from settings.

    Providers default to the OpenAI-compatible HTTP clients.
    """
    settings = settings or get_settings()
    llm_client = llm_client or OpenAICompatibleClient(settings=settings.llm)
    embedding_service = embedding_service or HTTPEmbeddingService(settings=settings.embedding)

    return ProcessingPipeline(
        chunker=SemanticChunker(settings.chunking),
        context_generator=ContextGenerator(llm_client, settings.context),
        embedder=Embedder(embedding_service, settings.embedding),
        skip_context=skip_context,
    )
