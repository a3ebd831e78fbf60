"""
Exception hierarchy for the ragcore context engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the engine
"""

from typing import Any


class RagCoreException(Exception):
    """Base exception for all ragcore errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(RagCoreException):
    """Raised when input validation fails, before any I/O happens."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigurationError(RagCoreException):
    """Raised when the engine is missing a collaborator it needs."""


class ProviderError(RagCoreException):
    """Base exception for failures of external providers."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Name of the provider that failed
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class EmbeddingError(ProviderError):
    """Raised when embedding generation fails or returns malformed output."""


class RerankError(ProviderError):
    """Raised when the reranker fails or returns malformed output."""


class VectorStoreError(RagCoreException):
    """Raised when a vector store operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class MissingTextError(RagCoreException):
    """Raised when a rerank candidate has no text and no skip policy applies."""

    def __init__(
        self,
        candidate_index: int,
        candidate_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize missing text error.

        Args:
            candidate_index: Position of the candidate in the rerank input
            candidate_id: Chunk id of the candidate, when known
            details: Additional context
        """
        details = details or {}
        details["candidate_index"] = candidate_index
        if candidate_id:
            details["candidate_id"] = candidate_id
        self.candidate_index = candidate_index
        self.candidate_id = candidate_id
        id_part = f" (id={candidate_id})" if candidate_id else ""
        message = (
            f"Candidate {candidate_index}{id_part} has empty content. "
            "Enable 'store_chunk_content', provide a 'resolve_text' hook, "
            "or use on_missing_text='skip'."
        )
        super().__init__(message, details)


class ConnectorAbortedError(RagCoreException):
    """Raised when connector stream consumption is stopped by the caller."""
