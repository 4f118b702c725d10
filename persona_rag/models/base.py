"""Base model classes for Persona RAG."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class PersonaRagBaseModel(BaseModel):
    """Base model with common configuration for all Persona RAG models."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignment after model creation
        validate_assignment=True,
        extra='forbid',
    )


class FrozenModel(PersonaRagBaseModel):
    """Base model for values that never change after creation."""

    model_config = ConfigDict(frozen=True)


class StatsModel(PersonaRagBaseModel):
    """Base model for statistics responses."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When these statistics were generated"
    )
