"""Vector-similarity index interface and Qdrant implementation."""

from abc import ABC, abstractmethod

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import FieldCondition, Filter, MatchValue

from contextual_rag.config import QdrantSettings, get_settings
from contextual_rag.exceptions import ErrorCode, VectorStoreError
from contextual_rag.logging_config import get_logger
from contextual_rag.vectorstore.models import SearchHit

logger = get_logger(__name__)


class VectorIndex(ABC):
    """Top-N search by vector similarity, scoped to a tenant."""

    @abstractmethod
    async def search(
        self,
        tenant_id: str,
        vector: list[float],
        limit: int,
    ) -> list[SearchHit]:
        """Search for the chunks most similar to a vector.

        Args:
            tenant_id: Tenant whose chunks are searched.
            vector: Query vector.
            limit: Maximum results to return.

        Returns:
            Hits ranked by descending similarity.

        Raises:
            VectorStoreError: If search fails.
        """
        ...


def tenant_filter(settings: QdrantSettings, tenant_id: str) -> FieldCondition:
    """Payload condition restricting a query to one tenant."""
    return FieldCondition(key=settings.tenant_field, match=MatchValue(value=tenant_id))


class QdrantVectorIndex(VectorIndex):
    """Qdrant vector similarity search over stored chunks.

    Each point's payload holds ``source_id``, ``source_name``, ``content``,
    ``context``, ``metadata`` and the tenant field.
    """

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize the Qdrant vector index.

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
        vector: list[float],
        limit: int,
    ) -> list[SearchHit]:
        """Search the tenant's chunks by cosine similarity."""
        client = await self._get_client()

        try:
            results = await client.query_points(
                collection_name=self._settings.collection_name,
                query=vector,
                limit=limit,
                query_filter=Filter(must=[tenant_filter(self._settings, tenant_id)]),
                with_payload=True,
            )
        except Exception as e:
            raise VectorStoreError(
                f"Vector search failed: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={
                    "collection": self._settings.collection_name,
                    "tenant_id": tenant_id,
                    "error": str(e),
                },
            ) from e

        hits = [
            SearchHit.from_payload(
                str(point.id),
                point.score,
                dict(point.payload) if point.payload else None,
            )
            for point in results.points
        ]
        logger.debug(
            f"Vector search returned {len(hits)} hits",
            extra={"tenant_id": tenant_id, "limit": limit},
        )
        return hits
