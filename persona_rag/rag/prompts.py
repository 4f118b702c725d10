"""Grounded prompt assembly."""

from typing import Optional, Sequence

from ..models.knowledge import RetrievedChunk

INSUFFICIENT_KNOWLEDGE_REPLY = "I don't have enough information to answer that question."
NO_KNOWLEDGE_BLOCK = "No relevant knowledge found."
DEFAULT_PERSONALITY = "Helpful and professional."

PROMPT_TEMPLATE = """System:
You are {persona_name}.
Personality: {personality}

Only answer using the provided knowledge below.
If the knowledge is insufficient to answer the question, respond with:
"{refusal}"

Do NOT make up facts. Do NOT answer outside the provided knowledge.

Knowledge:
{knowledge}

User:
{message}"""


def format_knowledge_block(chunks: Sequence[RetrievedChunk]) -> str:
    """Render retrieved chunks in the order given, numbered from 1."""
    if not chunks:
        return NO_KNOWLEDGE_BLOCK

    return "\n\n".join(
        f"[Chunk {i}] (relevance: {chunk.score:.3f})\n{chunk.text}"
        for i, chunk in enumerate(chunks, start=1)
    )


def build_prompt(
    persona_name: str,
    personality_prompt: Optional[str],
    chunks: Sequence[RetrievedChunk],
    user_message: str,
    default_personality: str = DEFAULT_PERSONALITY,
) -> str:
    """Assemble the persona, instructions, knowledge and user blocks."""
    personality = personality_prompt if personality_prompt and personality_prompt.strip() else default_personality

    return PROMPT_TEMPLATE.format(
        persona_name=persona_name,
        personality=personality,
        refusal=INSUFFICIENT_KNOWLEDGE_REPLY,
        knowledge=format_knowledge_block(chunks),
        message=user_message,
    )
