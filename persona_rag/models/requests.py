"""Request and response bodies for the HTTP surface."""

from typing import Optional

from pydantic import Field

from .base import PersonaRagBaseModel


class KnowledgeBaseRequest(PersonaRagBaseModel):
    """Replace a persona's knowledge base."""

    knowledge_base: str = Field(default="", description="Raw knowledge base text")
    namespace: Optional[str] = Field(
        default=None,
        description="Collection name; derived from the persona ID when omitted"
    )


class ChatRequest(PersonaRagBaseModel):
    """Ask a persona a question."""

    message: str = Field(description="The user's message")
    name: str = Field(min_length=1, description="Persona display name")
    personality_prompt: Optional[str] = Field(default=None, description="Persona personality")
    namespace: Optional[str] = Field(
        default=None,
        description="Collection name; derived from the persona ID when omitted"
    )


class ChatResponse(PersonaRagBaseModel):
    """A persona's reply."""

    reply: str = Field(description="Generated answer text")


class DeleteKnowledgeResponse(PersonaRagBaseModel):
    """Outcome of dropping a persona's knowledge."""

    namespace: str = Field(description="Collection name")
    deleted: bool = Field(description="Whether a collection existed and was dropped")
