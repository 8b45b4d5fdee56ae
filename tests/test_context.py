"""Tests for chunk context generation."""

from unittest.mock import AsyncMock, patch

import pytest

from contextual_rag.config import ContextSettings
from contextual_rag.context.generator import (
    ContextGenerator,
    combine_context,
    create_context_generator,
    fallback_context,
)
from contextual_rag.context.prompts import ChunkContextPrompt, FullDocumentContextPrompt
from contextual_rag.documents.models import DocumentMetadata, TextChunk
from contextual_rag.exceptions import ErrorCode, LLMError


def make_chunks(count: int) -> list[TextChunk]:
    return [
        TextChunk(
            content=f"Paragraph {i} of the handbook.",
            index=i,
            start_char=i * 40,
            end_char=i * 40 + 30,
        )
        for i in range(count)
    ]


class TestHelpers:
    """Tests for context helpers."""

    def test_fallback_context(self, document_metadata: DocumentMetadata) -> None:
        """Fallback context names the document and its type."""
        assert fallback_context(document_metadata) == "From Employee Handbook (pdf)."

    def test_combine_context(self) -> None:
        """Context and content are separated by a blank line."""
        combined = combine_context("About leave.", "Staff get 20 days.")
        assert combined == "About leave.\n\nStaff get 20 days."


class TestContextGenerator:
    """Tests for ContextGenerator."""

    @pytest.mark.asyncio
    async def test_generate_for_chunk(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """Generated context is prepended to the chunk content."""
        generator = ContextGenerator(llm_client, context_settings)
        chunk = make_chunks(1)[0]

        result = await generator.generate_for_chunk(chunk, document_metadata)

        assert result.context == "This chunk describes vacation policy."
        assert result.contextual_content == (
            "This chunk describes vacation policy.\n\nParagraph 0 of the handbook."
        )
        assert result.content == chunk.content
        assert result.index == chunk.index
        assert result.end_char == chunk.end_char

    @pytest.mark.asyncio
    async def test_prompt_and_limits(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """The prompt names the document and the configured limits are used."""
        generator = ContextGenerator(llm_client, context_settings)

        await generator.generate_for_chunk(make_chunks(1)[0], document_metadata)

        prompt = llm_client.complete.call_args.args[0]
        assert "Employee Handbook (pdf)" in prompt
        assert "Paragraph 0 of the handbook." in prompt
        assert llm_client.complete.call_args.kwargs == {"max_tokens": 100, "temperature": 0.3}

    @pytest.mark.asyncio
    async def test_failure_uses_fallback(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """LLM failures produce the metadata fallback context."""
        llm_client.complete.side_effect = LLMError("timed out", code=ErrorCode.LLM_TIMEOUT)
        generator = ContextGenerator(llm_client, context_settings)

        result = await generator.generate_for_chunk(make_chunks(1)[0], document_metadata)

        assert result.context == "From Employee Handbook (pdf)."
        assert result.contextual_content == (
            "From Employee Handbook (pdf).\n\nParagraph 0 of the handbook."
        )

    @pytest.mark.asyncio
    async def test_unexpected_failure_uses_fallback(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """Any exception from the LLM client is contained."""
        llm_client.complete.side_effect = RuntimeError("connection reset")
        generator = ContextGenerator(llm_client, context_settings)

        result = await generator.generate_for_chunk(make_chunks(1)[0], document_metadata)

        assert result.context == "From Employee Handbook (pdf)."

    @pytest.mark.asyncio
    async def test_empty_completion_uses_fallback(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """An empty completion counts as a failure."""
        llm_client.complete.return_value = ""
        generator = ContextGenerator(llm_client, context_settings)

        result = await generator.generate_for_chunk(make_chunks(1)[0], document_metadata)

        assert result.context == "From Employee Handbook (pdf)."

    def test_fallback_for_chunk(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """The fallback path never calls the LLM."""
        generator = ContextGenerator(llm_client, context_settings)

        result = generator.fallback_for_chunk(make_chunks(1)[0], document_metadata)

        assert result.context == "From Employee Handbook (pdf)."
        llm_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_generate_for_chunks_batches(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """Chunks are processed in batches with progress after each batch."""
        generator = ContextGenerator(llm_client, context_settings)
        progress: list[tuple[int, int]] = []

        results = await generator.generate_for_chunks(
            make_chunks(12), document_metadata, on_progress=lambda d, t: progress.append((d, t))
        )

        assert len(results) == 12
        assert progress == [(5, 12), (10, 12), (12, 12)]
        assert llm_client.complete.call_count == 12

    @pytest.mark.asyncio
    async def test_generate_for_chunks_keeps_order(
        self, context_settings: ContextSettings, document_metadata: DocumentMetadata
    ) -> None:
        """Results follow input order even when later calls finish first."""
        chunks = make_chunks(5)

        async def complete(prompt: str, max_tokens: int, temperature: float) -> str:
            for chunk in chunks:
                if chunk.content in prompt:
                    return f"Context for {chunk.index}."
            return ""

        llm_client = AsyncMock()
        llm_client.complete = AsyncMock(side_effect=complete)
        generator = ContextGenerator(llm_client, context_settings)

        results = await generator.generate_for_chunks(chunks, document_metadata)

        assert [r.index for r in results] == [0, 1, 2, 3, 4]
        assert [r.context for r in results] == [f"Context for {i}." for i in range(5)]

    @pytest.mark.asyncio
    async def test_partial_failures_in_batch(
        self, context_settings: ContextSettings, document_metadata: DocumentMetadata
    ) -> None:
        """One failing chunk does not affect the rest of its batch."""
        llm_client = AsyncMock()
        llm_client.complete = AsyncMock(
            side_effect=["ctx 0", LLMError("rate limited", code=ErrorCode.LLM_RATE_LIMIT), "ctx 2"]
        )
        generator = ContextGenerator(llm_client, context_settings)

        results = await generator.generate_for_chunks(make_chunks(3), document_metadata)

        assert [r.context for r in results] == ["ctx 0", "From Employee Handbook (pdf).", "ctx 2"]

    @pytest.mark.asyncio
    async def test_delay_between_batches(
        self, llm_client: AsyncMock, document_metadata: DocumentMetadata
    ) -> None:
        """Batches are separated by the configured delay."""
        generator = ContextGenerator(llm_client, ContextSettings(batch_size=5, batch_delay=0.5))

        with patch(
            "contextual_rag.context.generator.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            await generator.generate_for_chunks(make_chunks(12), document_metadata)

        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_generate_for_chunks_empty(
        self,
        llm_client: AsyncMock,
        context_settings: ContextSettings,
        document_metadata: DocumentMetadata,
    ) -> None:
        """No chunks means no LLM calls."""
        generator = ContextGenerator(llm_client, context_settings)

        assert await generator.generate_for_chunks([], document_metadata) == []
        llm_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_full_document_truncated(
        self, llm_client: AsyncMock, document_metadata: DocumentMetadata
    ) -> None:
        """Long documents are truncated before prompting."""
        generator = ContextGenerator(llm_client, ContextSettings(max_document_chars=100))
        document = "a" * 150

        result = await generator.generate_with_full_document(
            make_chunks(1)[0], document, document_metadata
        )

        prompt = llm_client.complete.call_args.args[0]
        assert "a" * 100 + "..." in prompt
        assert "a" * 101 not in prompt
        assert result.context == "This chunk describes vacation policy."

    @pytest.mark.asyncio
    async def test_full_document_short_not_truncated(
        self, llm_client: AsyncMock, document_metadata: DocumentMetadata
    ) -> None:
        """Documents within the limit are sent as-is."""
        generator = ContextGenerator(llm_client, ContextSettings(max_document_chars=100))

        await generator.generate_with_full_document(
            make_chunks(1)[0], "Short doc.", document_metadata
        )

        prompt = llm_client.complete.call_args.args[0]
        assert "<document>\nShort doc.\n</document>" in prompt

    @pytest.mark.asyncio
    async def test_full_document_falls_back_to_metadata_prompt(
        self, context_settings: ContextSettings, document_metadata: DocumentMetadata
    ) -> None:
        """A failed full-document call retries with the metadata prompt."""
        llm_client = AsyncMock()
        llm_client.complete = AsyncMock(
            side_effect=[LLMError("too long"), "From the leave section."]
        )
        generator = ContextGenerator(llm_client, context_settings)

        result = await generator.generate_with_full_document(
            make_chunks(1)[0], "Whole handbook text.", document_metadata
        )

        assert result.context == "From the leave section."
        assert llm_client.complete.call_count == 2
        assert "Employee Handbook (pdf)" in llm_client.complete.call_args.args[0]

    def test_create_context_generator(
        self, llm_client: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Factory builds a generator."""
        assert isinstance(create_context_generator(llm_client, context_settings), ContextGenerator)


class TestPrompts:
    """Tests for context prompt templates."""

    def test_chunk_prompt(self) -> None:
        """Chunk prompt includes the document and chunk."""
        prompt = ChunkContextPrompt().format(
            title="Handbook", document_type="pdf", chunk="Leave rules."
        )
        assert "Document: Handbook (pdf)" in prompt
        assert "Leave rules." in prompt

    def test_custom_template(self) -> None:
        """Templates can be replaced."""
        prompt = ChunkContextPrompt(template="{title}|{document_type}|{chunk}")
        assert prompt.format(title="a", document_type="b", chunk="c") == "a|b|c"

    def test_full_document_prompt(self) -> None:
        """Full-document prompt wraps document and chunk."""
        prompt = FullDocumentContextPrompt().format(document="Doc body.", chunk="Chunk body.")
        assert "<document>\nDoc body.\n</document>" in prompt
        assert "<chunk>\nChunk body.\n</chunk>" in prompt
