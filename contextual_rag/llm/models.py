"""Chat message and generation models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Message role in a chat completion request."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A chat message sent to the LLM."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Message role")
    content: str = Field(description="Message content")


class GenerationResult(BaseModel):
    """Completion returned by the LLM.

    Token counts are zero when the provider does not report usage.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text")
    model: str = Field(description="Model that produced the completion")
    prompt_tokens: int = Field(default=0, ge=0, description="Prompt token count")
    completion_tokens: int = Field(default=0, ge=0, description="Completion token count")
    total_tokens: int = Field(default=0, ge=0, description="Total token count")
