"""Custom exceptions for Persona RAG."""

from typing import Any, Dict, Optional


class PersonaRagError(Exception):
    """Base exception for all Persona RAG errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]
        if self.error_code:
            parts.append(f"(code: {self.error_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(PersonaRagError):
    """Raised when there's a configuration issue."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class ValidationError(PersonaRagError):
    """Raised when data validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ChunkingError(PersonaRagError):
    """Raised when the chunker is called with malformed parameters."""

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        details = {"parameter": parameter} if parameter else {}
        super().__init__(message, "CHUNKING_ERROR", details)


class EmbeddingServiceError(PersonaRagError):
    """Raised when the embedding provider fails or returns no usable vector."""

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        details = {"provider": provider} if provider else {}
        super().__init__(message, "EMBEDDING_SERVICE_ERROR", details)


class VectorIndexError(PersonaRagError):
    """Raised when a vector index operation fails."""

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if namespace:
            details["namespace"] = namespace
        if operation:
            details["operation"] = operation
        super().__init__(message, "VECTOR_INDEX_ERROR", details)


class GenerationError(PersonaRagError):
    """Raised when the generation provider fails or returns no candidate."""

    def __init__(self, message: str, model: Optional[str] = None) -> None:
        details = {"model": model} if model else {}
        super().__init__(message, "GENERATION_ERROR", details)
