"""Sentence-aware document chunking.

Text is split into paragraphs on blank lines, paragraphs into sentences, and
sentences are packed greedily into token-bounded chunks. Consecutive chunks
share whole trailing sentences as overlap.

Sentence boundaries are detected with a regex (terminal punctuation followed
by whitespace and a capital letter), so abbreviations such as "Dr. Smith"
and decimals followed by capitalized words are split incorrectly. The packing
algorithm does not depend on the splitter; a real sentence tokenizer can be
dropped into ``split_sentences``.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

from contextual_rag.config import ChunkingSettings, get_settings
from contextual_rag.documents.models import TextChunk
from contextual_rag.exceptions import ConfigurationError
from contextual_rag.logging_config import get_logger

logger = get_logger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n[ \t\r\f\v]*\n\s*")
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")
WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Sentence:
    """A normalized sentence and its span in the source text."""

    text: str
    start: int
    end: int


def estimate_tokens(text: str, chars_per_token: int = 4) -> int:
    """Estimate the token count of text as ceil(chars / chars_per_token)."""
    return math.ceil(len(text) / chars_per_token)


def _strip_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink [start, end) so it excludes surrounding whitespace."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def split_paragraphs(text: str) -> list[tuple[int, int]]:
    """Split text into paragraph spans on runs of blank lines.

    Returns:
        (start, end) offsets of each non-empty paragraph.
    """
    spans: list[tuple[int, int]] = []
    position = 0
    for match in PARAGRAPH_BREAK.finditer(text):
        spans.append((position, match.start()))
        position = match.end()
    spans.append((position, len(text)))

    paragraphs = []
    for start, end in spans:
        start, end = _strip_span(text, start, end)
        if start < end:
            paragraphs.append((start, end))
    return paragraphs


def split_sentences(text: str, start: int = 0, end: int | None = None) -> list[Sentence]:
    """Split text[start:end] into sentences.

    A paragraph without terminal punctuation is one sentence.
    """
    end = len(text) if end is None else end
    region = text[start:end]

    bounds: list[tuple[int, int]] = []
    position = 0
    for match in SENTENCE_BOUNDARY.finditer(region):
        bounds.append((position, match.start()))
        position = match.end()
    bounds.append((position, len(region)))

    sentences = []
    for s_start, s_end in bounds:
        s_start, s_end = _strip_span(region, s_start, s_end)
        if s_start >= s_end:
            continue
        normalized = WHITESPACE.sub(" ", region[s_start:s_end])
        sentences.append(Sentence(normalized, start + s_start, start + s_end))
    return sentences


class SemanticChunker:
    """Packs sentences into token-bounded chunks with sentence overlap."""

    def __init__(self, settings: ChunkingSettings | None = None) -> None:
        """Initialize the chunker.

        Args:
            settings: Chunking configuration. Uses defaults if not provided.

        Raises:
            ConfigurationError: If the overlap is not smaller than the chunk size.
        """
        self._settings = settings or get_settings().chunking
        if self._settings.overlap >= self._settings.chunk_size:
            raise ConfigurationError(
                "overlap must be less than chunk_size",
                details={
                    "chunk_size": self._settings.chunk_size,
                    "overlap": self._settings.overlap,
                },
            )

    @property
    def settings(self) -> ChunkingSettings:
        """Get the chunking configuration."""
        return self._settings

    def _tokens(self, text: str) -> int:
        return estimate_tokens(text, self._settings.chars_per_token)

    def _tokens_for_length(self, length: int) -> int:
        return math.ceil(length / self._settings.chars_per_token)

    @staticmethod
    def _joined_length(sentences: list[Sentence]) -> int:
        if not sentences:
            return 0
        return sum(len(s.text) for s in sentences) + len(sentences) - 1

    def chunk(self, text: str) -> list[TextChunk]:
        """Split text into ordered, overlapping chunks.

        Args:
            text: Raw document text.

        Returns:
            Chunks with contiguous indexes starting at 0. Empty or
            whitespace-only input yields an empty list.
        """
        if not text or not text.strip():
            return []

        sentences: list[Sentence] = []
        for start, end in split_paragraphs(text):
            sentences.extend(split_sentences(text, start, end))

        chunks: list[TextChunk] = []
        current: list[Sentence] = []
        # Number of leading sentences in `current` carried over from the previous chunk
        seeded = 0

        for sentence in sentences:
            candidate_length = self._joined_length(current) + len(sentence.text)
            if current:
                candidate_length += 1

            if current and self._tokens_for_length(candidate_length) > self._settings.chunk_size:
                chunks.append(self._build_chunk(current, len(chunks)))
                current = self._overlap_sentences(current)
                # Drop seed sentences that would push the next chunk past its size
                while current and self._tokens_for_length(
                    self._joined_length(current) + 1 + len(sentence.text)
                ) > self._settings.chunk_size:
                    current = current[1:]
                seeded = len(current)

            current.append(sentence)

        if current:
            trailing = " ".join(s.text for s in current)
            if self._tokens(trailing) >= self._settings.min_chunk_size or not chunks:
                chunks.append(self._build_chunk(current, len(chunks)))
            else:
                chunks[-1] = self._merge_into(chunks[-1], current[seeded:])

        logger.debug(
            f"Chunked text into {len(chunks)} chunks",
            extra={"text_length": len(text), "sentence_count": len(sentences)},
        )
        return chunks

    def chunk_with_metadata(
        self,
        text: str,
        document_metadata: dict[str, Any],
    ) -> list[TextChunk]:
        """Chunk text and merge document metadata into every chunk.

        Args:
            text: Raw document text.
            document_metadata: Fields copied into each chunk's metadata.

        Returns:
            Chunks carrying both chunk and document metadata.
        """
        return [
            chunk.model_copy(update={"metadata": {**chunk.metadata, **document_metadata}})
            for chunk in self.chunk(text)
        ]

    def _build_chunk(self, sentences: list[Sentence], index: int) -> TextChunk:
        content = " ".join(s.text for s in sentences)
        return TextChunk(
            content=content,
            index=index,
            start_char=sentences[0].start,
            end_char=sentences[-1].end,
            metadata={
                "token_estimate": self._tokens(content),
                "sentence_count": len(sentences),
            },
        )

    def _merge_into(self, previous: TextChunk, sentences: list[Sentence]) -> TextChunk:
        """Append the new sentences of an undersized trailing chunk to previous."""
        if not sentences:
            return previous
        tail = " ".join(s.text for s in sentences)
        metadata = dict(previous.metadata)
        metadata["token_estimate"] = metadata.get("token_estimate", 0) + self._tokens(tail)
        metadata["sentence_count"] = metadata.get("sentence_count", 0) + len(sentences)
        return previous.model_copy(
            update={
                "content": f"{previous.content} {tail}",
                "end_char": sentences[-1].end,
                "metadata": metadata,
            }
        )

    def _overlap_sentences(self, sentences: list[Sentence]) -> list[Sentence]:
        """Collect whole trailing sentences that fit within the overlap budget."""
        overlap: list[Sentence] = []
        for sentence in reversed(sentences):
            length = self._joined_length([sentence, *overlap])
            if self._tokens_for_length(length) > self._settings.overlap:
                break
            overlap.insert(0, sentence)
        return overlap


def create_chunker(settings: ChunkingSettings | None = None) -> SemanticChunker:
    """Create a chunker with the given or default settings."""
    return SemanticChunker(settings)
