"""Hybrid retrieval: vector + full-text search fused with Reciprocal Rank Fusion.

For a chunk at 1-based rank r in a result list, RRF adds
``weight / (k + r)`` to its score, where the vector list is weighted by
``vector_weight`` and the full-text list by ``1 - vector_weight``. Chunks found
by both paths accumulate both contributions. Fused scores are normalized by
the maximum so the best chunk scores 1.0, then thresholded, cut to top-k and
truncated to a character budget.
"""

import asyncio
import time
from dataclasses import dataclass

from contextual_rag.config import RetrievalSettings, get_settings
from contextual_rag.embeddings.embedder import Embedder
from contextual_rag.exceptions import ErrorCode, RAGPlatformError, RetrievalError
from contextual_rag.logging_config import get_logger
from contextual_rag.observability.metrics import track_fts_failure, track_retrieval_request
from contextual_rag.retrieval.models import (
    RAGResult,
    RetrievalMetrics,
    RetrievalOptions,
    RetrievedChunk,
    SearchType,
)
from contextual_rag.textsearch.query import extract_terms
from contextual_rag.textsearch.service import TextIndex
from contextual_rag.vectorstore.models import SearchHit
from contextual_rag.vectorstore.service import VectorIndex

logger = get_logger(__name__)

# A partially truncated chunk must keep at least this many characters
MIN_PARTIAL_CHARS = 200
ELLIPSIS = "..."


@dataclass
class _Candidate:
    hit: SearchHit
    vector_score: float = 0.0
    fts_score: float = 0.0
    rrf_score: float = 0.0


def reciprocal_rank_fusion(
    vector_hits: list[SearchHit],
    fts_hits: list[SearchHit],
    vector_weight: float,
    k: int = 60,
) -> list[RetrievedChunk]:
    """Fuse two ranked hit lists into one normalized ranking.

    Both raw scores are kept for chunks found by both paths. Content and
    metadata come from the first list that returned the chunk. Ties keep
    their first-seen order (vector hits before full-text-only hits).

    Args:
        vector_hits: Hits ranked by vector similarity.
        fts_hits: Hits ranked by full-text score.
        vector_weight: Weight of the vector list; full-text gets the rest.
        k: RRF constant.

    Returns:
        Chunks sorted by descending combined score in [0, 1].
    """
    fts_weight = 1.0 - vector_weight
    candidates: dict[str, _Candidate] = {}

    for rank, hit in enumerate(vector_hits, start=1):
        candidate = candidates.setdefault(hit.id, _Candidate(hit=hit))
        candidate.vector_score = hit.score
        candidate.rrf_score += vector_weight / (k + rank)

    for rank, hit in enumerate(fts_hits, start=1):
        candidate = candidates.setdefault(hit.id, _Candidate(hit=hit))
        candidate.fts_score = hit.score
        candidate.rrf_score += fts_weight / (k + rank)

    if not candidates:
        return []

    max_rrf = max(c.rrf_score for c in candidates.values())
    fused = [
        RetrievedChunk(
            id=c.hit.id,
            source_id=c.hit.source_id,
            source_name=c.hit.source_name,
            content=c.hit.content,
            context=c.hit.context,
            vector_score=c.vector_score,
            fts_score=c.fts_score,
            combined_score=c.rrf_score / max_rrf if max_rrf > 0 else 0.0,
            metadata=c.hit.metadata,
        )
        for c in candidates.values()
    ]
    fused.sort(key=lambda chunk: chunk.combined_score, reverse=True)
    return fused


def truncate_to_budget(chunks: list[RetrievedChunk], max_length: int) -> list[RetrievedChunk]:
    """Keep leading chunks whose combined content fits within max_length.

    The first chunk that does not fit is cut and suffixed with an ellipsis
    when more than MIN_PARTIAL_CHARS of budget remain; otherwise it is
    dropped. Nothing after it is returned.
    """
    result: list[RetrievedChunk] = []
    total = 0

    for chunk in chunks:
        if total + len(chunk.content) > max_length:
            remaining = max_length - total
            if remaining > MIN_PARTIAL_CHARS:
                content = chunk.content[: remaining - len(ELLIPSIS)] + ELLIPSIS
                result.append(chunk.model_copy(update={"content": content}))
            break

        result.append(chunk)
        total += len(chunk.content)

    return result


class HybridRetriever:
    """Retrieves the chunks most relevant to a query for one tenant."""

    def __init__(
        self,
        embedder: Embedder,
        vector_index: VectorIndex,
        text_index: TextIndex | None = None,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            embedder: Embeds queries.
            vector_index: Vector-similarity store.
            text_index: Full-text store. Without one, retrieval is vector-only.
            settings: Retrieval defaults. Uses defaults if not provided.
        """
        self._embedder = embedder
        self._vector_index = vector_index
        self._text_index = text_index
        self._settings = settings or get_settings().retrieval

    async def retrieve(
        self,
        tenant_id: str,
        query: str,
        options: RetrievalOptions | None = None,
    ) -> RAGResult:
        """Retrieve ranked, truncated chunks for a query.

        Args:
            tenant_id: Tenant whose knowledge base is searched.
            query: Query text.
            options: Per-call overrides of the retrieval settings.

        Returns:
            RAGResult with chunks, search type, timing and metrics. Full-text
            failures degrade the result toward vector-only.

        Raises:
            EmbeddingError: If the query cannot be embedded.
            VectorStoreError: If the vector search fails.
            RetrievalError: If the vector search fails unexpectedly.
        """
        start = time.perf_counter()
        opts = (options or RetrievalOptions()).resolve(self._settings)
        metrics = RetrievalMetrics()

        query_vector = await self._embedder.embed_query(query)

        if opts.use_hybrid_search and self._text_index is not None:
            chunks = await self._hybrid_search(tenant_id, query, query_vector, opts, metrics)
            search_type = SearchType.HYBRID
        else:
            chunks = await self._vector_search(tenant_id, query_vector, opts, metrics)
            search_type = SearchType.VECTOR

        chunks = truncate_to_budget(chunks, opts.max_content_length)
        metrics.filtered_count = len(chunks)
        if chunks:
            metrics.avg_score = sum(c.combined_score for c in chunks) / len(chunks)

        processing_time_ms = (time.perf_counter() - start) * 1000

        logger.debug(
            "Retrieval completed",
            extra={
                "tenant_id": tenant_id,
                "query": query[:100],
                "search_type": search_type.value,
                **metrics.model_dump(),
                "processing_time_ms": processing_time_ms,
            },
        )
        track_retrieval_request(
            search_type.value,
            len(chunks),
            chunks[0].combined_score if chunks else 0.0,
            (metrics.vector_search_ms or 0.0) / 1000,
        )

        return RAGResult(
            chunks=chunks,
            query=query,
            total_found=len(chunks),
            search_type=search_type,
            processing_time_ms=processing_time_ms,
            metrics=metrics,
        )

    async def _hybrid_search(
        self,
        tenant_id: str,
        query: str,
        query_vector: list[float],
        opts: RetrievalSettings,
        metrics: RetrievalMetrics,
    ) -> list[RetrievedChunk]:
        limit = opts.top_k * opts.candidate_multiplier

        search_start = time.perf_counter()
        # A failed vector search cancels the full-text search still in flight
        try:
            async with asyncio.TaskGroup() as tg:
                vector_task = tg.create_task(
                    self._vector_search_raw(tenant_id, query_vector, limit)
                )
                fts_task = tg.create_task(self._fts_search_raw(tenant_id, query, limit))
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None
        vector_hits, fts_hits = vector_task.result(), fts_task.result()
        metrics.vector_search_ms = (time.perf_counter() - search_start) * 1000
        metrics.candidate_count = len(vector_hits) + len(fts_hits)

        fused = reciprocal_rank_fusion(
            vector_hits, fts_hits, opts.vector_weight, k=opts.rrf_k
        )
        metrics.fused_count = len(fused)

        return [c for c in fused if c.combined_score >= opts.threshold][: opts.top_k]

    async def _vector_search(
        self,
        tenant_id: str,
        query_vector: list[float],
        opts: RetrievalSettings,
        metrics: RetrievalMetrics,
    ) -> list[RetrievedChunk]:
        search_start = time.perf_counter()
        hits = await self._vector_search_raw(tenant_id, query_vector, opts.top_k * 2)
        metrics.vector_search_ms = (time.perf_counter() - search_start) * 1000
        metrics.candidate_count = len(hits)
        metrics.fused_count = len(hits)

        ranked = sorted(
            (
                RetrievedChunk(
                    id=hit.id,
                    source_id=hit.source_id,
                    source_name=hit.source_name,
                    content=hit.content,
                    context=hit.context,
                    vector_score=hit.score,
                    combined_score=hit.score,
                    metadata=hit.metadata,
                )
                for hit in hits
            ),
            key=lambda chunk: chunk.combined_score,
            reverse=True,
        )
        return [c for c in ranked if c.combined_score >= opts.threshold][: opts.top_k]

    async def _vector_search_raw(
        self,
        tenant_id: str,
        query_vector: list[float],
        limit: int,
    ) -> list[SearchHit]:
        """Vector search; failures are fatal."""
        try:
            return await self._vector_index.search(tenant_id, query_vector, limit)
        except RAGPlatformError:
            raise
        except Exception as e:
            logger.error(f"Vector search failed: {e}", extra={"tenant_id": tenant_id})
            raise RetrievalError(
                f"Vector search failed: {e}",
                code=ErrorCode.VECTOR_SEARCH_FAILED,
                details={"tenant_id": tenant_id, "error": str(e)},
            ) from e

    async def _fts_search_raw(
        self,
        tenant_id: str,
        query: str,
        limit: int,
    ) -> list[SearchHit]:
        """Full-text search; failures are logged and treated as no hits."""
        terms = extract_terms(query)
        if not terms or self._text_index is None:
            return []

        try:
            return await self._text_index.search(tenant_id, terms, limit)
        except Exception as e:
            logger.warning(
                f"Full-text search failed, continuing without it: {e}",
                extra={"tenant_id": tenant_id},
            )
            track_fts_failure()
            return []


def create_retriever(
    embedder: Embedder,
    vector_index: VectorIndex,
    text_index: TextIndex | None = None,
    settings: RetrievalSettings | None = None,
) -> HybridRetriever:
    """Create a retriever with the given or default settings."""
    return HybridRetriever(embedder, vector_index, text_index, settings)
