"""Rendering retrieved chunks for prompts and source lists."""

import math

from contextual_rag.retrieval.models import RetrievedChunk, SourceReference

NO_RESULTS_MESSAGE = "No relevant information found in the knowledge base."
CHUNK_SEPARATOR = "\n\n---\n\n"


def _percent(score: float) -> int:
    return math.floor(score * 100 + 0.5)


def format_as_context(chunks: list[RetrievedChunk]) -> str:
    """Render chunks as a numbered, source-labeled block for an LLM prompt.

    Example entry::

        [Source 1: handbook.pdf (87% match)]
        chunk text
    """
    if not chunks:
        return NO_RESULTS_MESSAGE

    return CHUNK_SEPARATOR.join(
        f"[Source {position}: {chunk.source_name} ({_percent(chunk.combined_score)}% match)]\n"
        f"{chunk.content}"
        for position, chunk in enumerate(chunks, start=1)
    )


def extract_sources(chunks: list[RetrievedChunk]) -> list[SourceReference]:
    """Deduplicate chunks by source, keeping each source's best relevance.

    Returns:
        Sources sorted by descending relevance percentage.
    """
    sources: dict[str, SourceReference] = {}

    for chunk in chunks:
        relevance = _percent(chunk.combined_score)
        existing = sources.get(chunk.source_id)
        if existing is None or relevance > existing.relevance:
            sources[chunk.source_id] = SourceReference(
                id=chunk.source_id,
                name=chunk.source_name,
                relevance=relevance,
            )

    return sorted(sources.values(), key=lambda source: source.relevance, reverse=True)
