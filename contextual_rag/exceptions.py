"""Exception hierarchy for the contextual retrieval pipeline.

All custom exceptions inherit from RAGPlatformError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    CONFIGURATION_ERROR = "RAG-1001"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "RAG-3000"
    EMBEDDING_DIMENSION_MISMATCH = "RAG-3001"
    EMBEDDING_COUNT_MISMATCH = "RAG-3002"

    # Store errors (4xxx)
    VECTOR_STORE_ERROR = "RAG-4000"
    TEXT_INDEX_ERROR = "RAG-4001"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "RAG-5000"
    LLM_TIMEOUT = "RAG-5001"
    LLM_RATE_LIMIT = "RAG-5002"
    LLM_EMPTY_RESPONSE = "RAG-5003"

    # Retrieval errors (6xxx)
    RETRIEVAL_ERROR = "RAG-6000"
    VECTOR_SEARCH_FAILED = "RAG-6001"


class RAGPlatformError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(RAGPlatformError):
    """Malformed or unsupported configuration."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class EmbeddingError(RAGPlatformError):
    """Embedding provider error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(RAGPlatformError):
    """Vector-similarity store error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class TextIndexError(RAGPlatformError):
    """Full-text store error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TEXT_INDEX_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(RAGPlatformError):
    """LLM service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class RetrievalError(RAGPlatformError):
    """Retrieval operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RETRIEVAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
