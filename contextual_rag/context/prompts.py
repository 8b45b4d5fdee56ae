"""Prompt templates for chunk context generation."""

from abc import ABC, abstractmethod
from typing import Any


class PromptTemplate(ABC):
    """Abstract base class for prompt templates."""

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the template with provided variables.

        Args:
            **kwargs: Template variables.

        Returns:
            Formatted prompt string.
        """
        ...


class ChunkContextPrompt(PromptTemplate):
    """Asks for a short context situating a chunk within its document.

    Only the document title and type are given, not the document text.
    """

    DEFAULT_TEMPLATE = """You are an AI assistant helping to improve document retrieval.
Given a document and a chunk from that document, provide a brief context (2-3 sentences)
that explains what this chunk is about and how it relates to the document.

Document: {title} ({document_type})

Chunk:
{chunk}

Provide ONLY the contextual description, no other text. Focus on:
- What specific topic/information this chunk contains
- Key entities, numbers, or facts mentioned
- How this relates to the overall document

Context:"""

    def __init__(self, template: str | None = None) -> None:
        self.template = template or self.DEFAULT_TEMPLATE

    def format(self, **kwargs: Any) -> str:
        """Format the prompt.

        Args:
            **kwargs: Must include 'title', 'document_type' and 'chunk'.
        """
        return self.template.format(**kwargs)


class FullDocumentContextPrompt(PromptTemplate):
    """Asks for a chunk context given the (truncated) full document."""

    DEFAULT_TEMPLATE = """<document>
{document}
</document>

Here is a chunk we want to situate within the document above:
<chunk>
{chunk}
</chunk>

Please give a short succinct context (2-3 sentences) to situate this chunk within the
overall document for improving search retrieval. Focus on what specific information this
chunk contains and any key entities or facts. Answer only with the context."""

    def __init__(self, template: str | None = None) -> None:
        self.template = template or self.DEFAULT_TEMPLATE

    def format(self, **kwargs: Any) -> str:
        """Format the prompt.

        Args:
            **kwargs: Must include 'document' and 'chunk'.
        """
        return self.template.format(**kwargs)
