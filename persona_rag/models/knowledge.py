"""Knowledge base domain models for Persona RAG."""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from .base import FrozenModel, PersonaRagBaseModel, StatsModel


class KnowledgeChunk(FrozenModel):
    """A contiguous, word-bounded slice of a knowledge base."""

    text: str = Field(description="Whitespace-normalized chunk text")
    ordinal: int = Field(ge=0, description="Position of the chunk within its ingestion")
    start_word: int = Field(ge=0, description="Index of the first word in the source")
    end_word: int = Field(ge=1, description="Index one past the last word in the source")

    @model_validator(mode="after")
    def _check_word_range(self) -> "KnowledgeChunk":
        if self.end_word <= self.start_word:
            raise ValueError("end_word must be greater than start_word")
        return self

    @property
    def word_count(self) -> int:
        """Number of words in the chunk."""
        return self.end_word - self.start_word


class EmbeddedChunk(PersonaRagBaseModel):
    """A chunk paired with its embedding vector, ready for indexing."""

    text: str = Field(description="Chunk text")
    vector: List[float] = Field(min_length=1, description="Embedding vector")
    persona_id: str = Field(description="Persona the chunk belongs to")
    ordinal: int = Field(ge=0, description="Chunk ordinal within its ingestion")

    @property
    def dimension(self) -> int:
        """Length of the embedding vector."""
        return len(self.vector)


class VectorPoint(PersonaRagBaseModel):
    """A point written to the vector index."""

    id: str = Field(description="Point identifier")
    vector: List[float] = Field(min_length=1, description="Embedding vector")
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Stored attributes; 'text' holds the chunk text"
    )

    @classmethod
    def from_embedded_chunk(cls, point_id: str, chunk: EmbeddedChunk) -> "VectorPoint":
        """Build a point from an embedded chunk."""
        return cls(
            id=point_id,
            vector=chunk.vector,
            payload={
                "text": chunk.text,
                "persona_id": chunk.persona_id,
                "ordinal": chunk.ordinal,
            },
        )


class RetrievedChunk(FrozenModel):
    """A chunk returned by similarity search."""

    text: str = Field(description="Chunk text")
    score: float = Field(description="Cosine similarity to the query (higher is closer)")


class Persona(PersonaRagBaseModel):
    """Read-only view of a persona record owned by the relational store."""

    id: str = Field(min_length=1, description="Persona identifier")
    name: str = Field(min_length=1, description="Display name")
    personality_prompt: Optional[str] = Field(
        default=None,
        description="Free-text personality description"
    )
    namespace: str = Field(min_length=1, description="Vector index collection name")

    @field_validator("personality_prompt")
    @classmethod
    def _blank_prompt_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class IngestionResult(PersonaRagBaseModel):
    """Summary of a completed knowledge base ingestion."""

    persona_id: str = Field(description="Persona whose knowledge was replaced")
    namespace: str = Field(description="Collection that now holds the knowledge")
    chunk_count: int = Field(ge=0, description="Number of chunks indexed")
    dimension: Optional[int] = Field(
        default=None,
        ge=1,
        description="Embedding dimension, unset when nothing was indexed"
    )


class CollectionStats(StatsModel):
    """Statistics about a persona's collection."""

    namespace: str = Field(description="Collection name")
    exists: bool = Field(description="Whether the collection exists")
    point_count: int = Field(default=0, ge=0, description="Number of stored chunks")
    dimension: Optional[int] = Field(
        default=None,
        ge=1,
        description="Declared embedding dimension"
    )
    distance: Optional[str] = Field(default=None, description="Distance metric")
