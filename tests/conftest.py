"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from contextual_rag.config import ContextSettings, EmbeddingSettings
from contextual_rag.documents.models import DocumentMetadata
from contextual_rag.embeddings.models import EmbeddingResult
from contextual_rag.embeddings.service import EmbeddingService
from contextual_rag.vectorstore.models import SearchHit


class FakeEmbeddingService(EmbeddingService):
    """In-memory embedding provider.

    Each text maps to a 3-dimensional vector derived from its length. Batch
    responses can be returned in reverse order to mimic providers that do
    not preserve input order.
    """

    def __init__(self, reverse: bool = False) -> None:
        self.reverse = reverse
        self.batch_calls: list[list[str]] = []

    @staticmethod
    def vector_for(text: str) -> list[float]:
        return [float(len(text)), 1.0, 0.0]

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        self.batch_calls.append(list(texts))
        results = [
            EmbeddingResult(
                index=i,
                embedding=self.vector_for(text),
                model="fake",
                dimensions=3,
            )
            for i, text in enumerate(texts)
        ]
        return list(reversed(results)) if self.reverse else results

    @property
    def model_name(self) -> str:
        return "fake"


def _make_hit(
    hit_id: str,
    score: float = 0.5,
    content: str | None = None,
    source_id: str | None = None,
) -> SearchHit:
    """Build a search hit with sensible defaults."""
    return SearchHit(
        id=hit_id,
        source_id=source_id or f"src-{hit_id}",
        source_name=f"{hit_id}.txt",
        content=content if content is not None else f"Content of {hit_id}",
        score=score,
    )


@pytest.fixture
def embedding_settings() -> EmbeddingSettings:
    """Embedding settings with 3-dimensional vectors and no back-off delay."""
    return EmbeddingSettings(dimensions=3, batch_size=20, max_retries=3, retry_base_delay=0.0)


@pytest.fixture
def context_settings() -> ContextSettings:
    """Context settings without inter-batch delay."""
    return ContextSettings(batch_delay=0.0)


@pytest.fixture
def fake_embedding_service() -> FakeEmbeddingService:
    """Embedding provider returning results in input order."""
    return FakeEmbeddingService()


@pytest.fixture
def document_metadata() -> DocumentMetadata:
    """Metadata of a sample document."""
    return DocumentMetadata(name="Employee Handbook", type="pdf")


@pytest.fixture
def llm_client() -> AsyncMock:
    """LLM client that always returns the same context."""
    client = AsyncMock()
    client.model_name = "test-model"
    client.complete = AsyncMock(return_value="This chunk describes vacation policy.")
    return client


@pytest.fixture
def reversed_embedding_service() -> FakeEmbeddingService:
    """Embedding provider returning batch results in reverse order."""
    return FakeEmbeddingService(reverse=True)


@pytest.fixture
def make_hit() -> Callable[..., SearchHit]:
    """Factory for search hits."""
    return _make_hit
