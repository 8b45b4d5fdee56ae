"""Prometheus metrics for the contextual retrieval pipeline.

Provides metrics instrumentation for:
- LLM token usage and latency
- Chunk context generation outcomes
- Embedding request latency and batch sizes
- Retrieval metrics (chunks, scores, search latency, full-text failures)
"""

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

# Context Generation Metrics
CONTEXT_GENERATION_TOTAL = Counter(
    "context_generation_total",
    "Chunk contexts produced",
    ["outcome"],  # generated, fallback
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 5, 10, 20, 50, 100],
)

# Retrieval Metrics
RETRIEVAL_CHUNKS_RETURNED = Histogram(
    "retrieval_chunks_returned",
    "Number of chunks returned per retrieval",
    ["search_type"],
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

RETRIEVAL_TOP_SCORE = Histogram(
    "retrieval_top_score",
    "Top combined score per query",
    ["search_type"],
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

RETRIEVAL_SEARCH_DURATION = Histogram(
    "retrieval_search_duration_seconds",
    "Wall-clock time of the store searches per query",
    ["search_type"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

FTS_FAILURES_TOTAL = Counter(
    "retrieval_fts_failures_total",
    "Full-text searches that failed and were treated as empty",
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track LLM request metrics.

    Args:
        model: LLM model name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_context_generation(fallback: bool) -> None:
    """Count a generated or fallback chunk context."""
    CONTEXT_GENERATION_TOTAL.labels(outcome="fallback" if fallback else "generated").inc()


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)


def track_retrieval_request(
    search_type: str,
    chunks_returned: int,
    top_score: float,
    search_seconds: float | None = None,
) -> None:
    """Track retrieval request metrics.

    Args:
        search_type: hybrid, vector or fts.
        chunks_returned: Number of chunks returned.
        top_score: Highest combined score.
        search_seconds: Wall-clock time of the store searches.
    """
    RETRIEVAL_CHUNKS_RETURNED.labels(search_type=search_type).observe(chunks_returned)
    if top_score > 0:
        RETRIEVAL_TOP_SCORE.labels(search_type=search_type).observe(top_score)
    if search_seconds is not None:
        RETRIEVAL_SEARCH_DURATION.labels(search_type=search_type).observe(search_seconds)


def track_fts_failure() -> None:
    """Count a full-text search failure."""
    FTS_FAILURES_TOTAL.inc()
