"""Embedding data models."""

from pydantic import BaseModel, Field


class EmbeddingResult(BaseModel):
    """One vector returned by the embedding provider.

    Attributes:
        index: Position of the input text in the request. Batch responses may
            arrive out of order; callers sort on this field.
        embedding: The embedding vector.
        model: The model used to generate the embedding.
        dimensions: Number of dimensions in the embedding.
    """

    index: int = Field(ge=0, description="Position of the input in the request")
    embedding: list[float] = Field(description="Embedding vector")
    model: str = Field(description="Model used for embedding")
    dimensions: int = Field(description="Vector dimensions")

    def model_post_init(self, __context: object) -> None:
        """Validate dimensions match embedding length."""
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )
