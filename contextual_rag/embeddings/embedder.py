"""Batched, retrying embedding of chunks and queries.

Every provider call is retried with exponential back-off: attempt n waits
``retry_base_delay * 2 ** (n - 1)`` seconds before the next one. Once
``max_retries`` attempts have failed the last error propagates; a chunk
without an embedding cannot be searched, so there is no fallback.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from contextual_rag.config import EmbeddingSettings, get_settings
from contextual_rag.documents.models import ContextualChunk, ProcessedChunk
from contextual_rag.embeddings.models import EmbeddingResult
from contextual_rag.embeddings.service import EmbeddingService
from contextual_rag.exceptions import EmbeddingError, ErrorCode
from contextual_rag.logging_config import get_logger
from contextual_rag.observability.metrics import track_embedding_request
from contextual_rag.textsearch.query import extract_terms

logger = get_logger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]


class Embedder:
    """Generates embeddings for chunks and queries."""

    def __init__(
        self,
        service: EmbeddingService,
        settings: EmbeddingSettings | None = None,
    ) -> None:
        """Initialize the embedder.

        Args:
            service: Embedding provider.
            settings: Embedding configuration. Uses defaults if not provided.
        """
        self._service = service
        self._settings = settings or get_settings().embedding

    async def _with_retry(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Call fn, retrying with exponential back-off."""
        attempt = 1
        while True:
            try:
                return await fn()
            except Exception as e:
                if attempt >= self._settings.max_retries:
                    logger.error(
                        f"Embedding failed after {attempt} attempts: {e}",
                        extra={"attempts": attempt},
                    )
                    raise
                delay = self._settings.retry_base_delay * 2 ** (attempt - 1)
                logger.warning(
                    f"Embedding attempt {attempt} failed, retrying in {delay}s: {e}",
                    extra={"attempt": attempt, "delay": delay},
                )
                await asyncio.sleep(delay)
                attempt += 1

    def _check_dimensions(self, vectors: list[list[float]]) -> None:
        expected = self._settings.dimensions
        if expected is None:
            return
        for vector in vectors:
            if len(vector) != expected:
                raise EmbeddingError(
                    f"Expected {expected}-dimensional embeddings, got {len(vector)}",
                    code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                    details={"expected": expected, "actual": len(vector)},
                )

    async def _tracked(self, call: Awaitable[T], count: int) -> T:
        """Await one provider call, recording its duration and outcome."""
        start = time.perf_counter()
        try:
            result = await call
        except Exception:
            track_embedding_request(
                self._service.model_name, time.perf_counter() - start, count, success=False
            )
            raise
        track_embedding_request(self._service.model_name, time.perf_counter() - start, count)
        return result

    async def _request(self, texts: list[str]) -> list[list[float]]:
        """One tracked provider call, re-sorted into input order."""
        results: list[EmbeddingResult] = await self._tracked(
            self._service.embed_batch(texts), len(texts)
        )

        if len(results) != len(texts):
            raise EmbeddingError(
                f"Embedding service returned {len(results)} vectors for {len(texts)} texts",
                code=ErrorCode.EMBEDDING_COUNT_MISMATCH,
                details={"expected": len(texts), "actual": len(results)},
            )
        return [result.embedding for result in sorted(results, key=lambda r: r.index)]

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in batches of ``batch_size``, preserving input order."""
        vectors: list[list[float]] = []
        batch_size = self._settings.batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            batch_vectors = await self._with_retry(lambda batch=batch: self._request(batch))
            self._check_dimensions(batch_vectors)
            vectors.extend(batch_vectors)

        return vectors

    def _processed(self, chunk: ContextualChunk, embedding: list[float]) -> ProcessedChunk:
        return ProcessedChunk(
            **chunk.model_dump(),
            embedding=embedding,
            fts_tokens=" ".join(extract_terms(chunk.contextual_content)),
        )

    async def embed_chunk(self, chunk: ContextualChunk) -> ProcessedChunk:
        """Embed a single chunk's contextual content."""
        vector = await self.embed_query(chunk.contextual_content)
        return self._processed(chunk, vector)

    async def embed_chunks(
        self,
        chunks: list[ContextualChunk],
        on_progress: ProgressCallback | None = None,
    ) -> list[ProcessedChunk]:
        """Embed chunks in batches.

        Args:
            chunks: Contextual chunks to embed.
            on_progress: Called with (completed, total) after each batch.

        Returns:
            Processed chunks in input order.

        Raises:
            Exception: The provider error once retries are exhausted.
        """
        results: list[ProcessedChunk] = []
        total = len(chunks)
        batch_size = self._settings.batch_size

        for i in range(0, total, batch_size):
            batch = chunks[i : i + batch_size]
            vectors = await self.embed_texts([c.contextual_content for c in batch])
            results.extend(self._processed(c, v) for c, v in zip(batch, vectors, strict=True))

            if on_progress is not None:
                on_progress(min(i + batch_size, total), total)

        return results

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single text (no batching) with retries."""
        result = await self._with_retry(lambda: self._tracked(self._service.embed(text), 1))
        self._check_dimensions([result.embedding])
        return result.embedding


def create_embedder(
    service: EmbeddingService,
    settings: EmbeddingSettings | None = None,
) -> Embedder:
    """Create an embedder with the given or default settings."""
    return Embedder(service, settings)
