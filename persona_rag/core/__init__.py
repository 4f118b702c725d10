"""Core service functionality for Persona RAG."""

from .exceptions import PersonaRagError, ConfigurationError, ValidationError

__all__ = ["PersonaRagError", "ConfigurationError", "ValidationError"]
