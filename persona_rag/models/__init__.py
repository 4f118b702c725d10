"""Persona RAG domain models."""

from .base import (
    FrozenModel,
    PersonaRagBaseModel,
    StatsModel,
)
from .requests import (
    ChatRequest,
    ChatResponse,
    DeleteKnowledgeResponse,
    KnowledgeBaseRequest,
)
from .knowledge import (
    CollectionStats,
    EmbeddedChunk,
    IngestionResult,
    KnowledgeChunk,
    Persona,
    RetrievedChunk,
    VectorPoint,
)

__all__ = [
    # Base models
    "PersonaRagBaseModel",
    "FrozenModel",
    "StatsModel",

    # Knowledge models
    "KnowledgeChunk",
    "EmbeddedChunk",
    "VectorPoint",
    "RetrievedChunk",
    "Persona",
    "IngestionResult",
    "CollectionStats",

    # HTTP bodies
    "KnowledgeBaseRequest",
    "ChatRequest",
    "ChatResponse",
    "DeleteKnowledgeResponse",
]
