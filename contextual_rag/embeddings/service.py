"""Embedding provider interface and HTTP implementation."""

from abc import ABC, abstractmethod

import httpx

from contextual_rag.config import EmbeddingSettings, get_settings
from contextual_rag.embeddings.models import EmbeddingResult
from contextual_rag.exceptions import EmbeddingError, ErrorCode
from contextual_rag.logging_config import get_logger

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding providers.

    One call is one provider request; batching and retries are handled by
    the Embedder.
    """

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Raises:
            EmbeddingError: If embedding fails.
        """
        results = await self.embed_batch([text])
        if not results:
            raise EmbeddingError(
                "Embedding service returned no vectors",
                code=ErrorCode.EMBEDDING_COUNT_MISMATCH,
            )
        return results[0]

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts in one request.

        Args:
            texts: Texts to embed.

        Returns:
            One result per text, possibly not in input order.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service using an OpenAI-compatible HTTP API.

    Also works with text-embeddings-inference (TEI) servers.
    """

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.api_key.get_secret_value()
        if api_key and api_key != "not-required":
            return {"Authorization": f"Bearer {api_key}"}
        return {}

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed texts in one request.

        Results keep the provider's order and carry its ``index`` field.
        """
        if not texts:
            return []

        client = await self._get_client()
        url = f"{self._settings.base_url}/embeddings"
        payload = {"input": texts, "model": self._settings.model}

        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            results: list[EmbeddingResult] = []
            for position, item in enumerate(data["data"]):
                embedding = item["embedding"]
                results.append(
                    EmbeddingResult(
                        index=item.get("index", position),
                        embedding=embedding,
                        model=data.get("model", self._settings.model),
                        dimensions=len(embedding),
                    )
                )
            return results

        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e
