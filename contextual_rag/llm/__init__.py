"""LLM client module."""

from contextual_rag.llm.client import LLMClient, OpenAICompatibleClient
from contextual_rag.llm.models import GenerationResult, Message, Role

__all__ = [
    "GenerationResult",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
    "Role",
]
