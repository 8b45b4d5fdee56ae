"""Full-text index interface and Qdrant implementation."""

from abc import ABC, abstractmethod

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import FieldCondition, Filter, MatchText

from contextual_rag.config import QdrantSettings, get_settings
from contextual_rag.exceptions import ErrorCode, TextIndexError
from contextual_rag.logging_config import get_logger
from contextual_rag.textsearch.query import extract_terms
from contextual_rag.vectorstore.models import SearchHit
from contextual_rag.vectorstore.service import tenant_filter

logger = get_logger(__name__)

TEXT_FIELDS = ("content", "context")


class TextIndex(ABC):
    """Top-N search by text match, scoped to a tenant."""

    @abstractmethod
    async def search(
        self,
        tenant_id: str,
        terms: list[str],
        limit: int,
    ) -> list[SearchHit]:
        """Search for chunks matching any of the terms.

        Args:
            tenant_id: Tenant whose chunks are searched.
            terms: Normalized query terms, OR-combined.
            limit: Maximum results to return.

        Returns:
            Hits ranked by descending match score in [0, 1].

        Raises:
            TextIndexError: If search fails.
        """
        ...


def term_coverage(terms: list[str], text: str) -> float:
    """Fraction of terms present in text."""
    if not terms:
        return 0.0
    words = set(extract_terms(text))
    return sum(1 for term in terms if term in words) / len(terms)


class QdrantTextIndex(TextIndex):
    """Full-text search over chunk payloads stored in Qdrant.

    Requires full-text payload indexes on ``content`` and ``context``.
    Qdrant filters do not rank, so up to ``text_scan_limit`` matching points
    are fetched and scored by the fraction of query terms they contain.
    """

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize the Qdrant text index.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(url=self._settings.url, api_key=api_key)
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def search(
        self,
        tenant_id: str,
        terms: list[str],
        limit: int,
    ) -> list[SearchHit]:
        """Search the tenant's chunks for any of the terms."""
        if not terms:
            return []

        client = await self._get_client()
        query_filter = Filter(
            must=[tenant_filter(self._settings, tenant_id)],
            should=[
                FieldCondition(key=field, match=MatchText(text=term))
                for term in terms
                for field in TEXT_FIELDS
            ],
        )

        try:
            records, _ = await client.scroll(
                collection_name=self._settings.collection_name,
                scroll_filter=query_filter,
                limit=max(limit, self._settings.text_scan_limit),
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            raise TextIndexError(
                f"Full-text search failed: {e}",
                code=ErrorCode.TEXT_INDEX_ERROR,
                details={
                    "collection": self._settings.collection_name,
                    "tenant_id": tenant_id,
                    "error": str(e),
                },
            ) from e

        hits = []
        for record in records:
            payload = dict(record.payload) if record.payload else {}
            text = f"{payload.get('content') or ''} {payload.get('context') or ''}"
            score = term_coverage(terms, text)
            if score > 0:
                hits.append(SearchHit.from_payload(str(record.id), score, payload))

        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]
