"""Search hit model shared by the vector and full-text indexes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchHit(BaseModel):
    """A stored chunk returned by a store search.

    Attributes:
        id: Chunk identifier.
        source_id: Identifier of the source document.
        source_name: Display name of the source document.
        content: Chunk text.
        context: Generated chunk context, if stored.
        score: Store-native similarity score (higher is more similar).
        metadata: Stored chunk metadata.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Chunk identifier")
    source_id: str = Field(default="", description="Source document identifier")
    source_name: str = Field(default="Unknown", description="Source document name")
    content: str = Field(default="", description="Chunk text")
    context: str | None = Field(default=None, description="Generated chunk context")
    score: float = Field(default=0.0, description="Similarity score")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")

    @classmethod
    def from_payload(
        cls,
        point_id: str,
        score: float | None,
        payload: dict[str, Any] | None,
    ) -> "SearchHit":
        """Build a hit from a stored point payload.

        Missing fields fall back to defaults; a missing source name becomes
        "Unknown".
        """
        payload = payload or {}
        return cls(
            id=point_id,
            source_id=str(payload.get("source_id") or ""),
            source_name=payload.get("source_name") or "Unknown",
            content=payload.get("content") or "",
            context=payload.get("context") or None,
            score=score or 0.0,
            metadata=payload.get("metadata") or {},
        )
