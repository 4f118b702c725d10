"""Validation utilities for persona identifiers, namespaces and messages."""

import re
from typing import Any

from ..core.exceptions import ValidationError

# Collection names accepted by ChromaDB: 3-63 characters from [a-zA-Z0-9._-],
# starting and ending with an alphanumeric character.
_NAMESPACE_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9._-]{1,61}[a-zA-Z0-9]$')
_PERSONA_ID_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_-]*$')


def validate_persona_id(persona_id: Any) -> str:
    """Validate a persona identifier and return it as a string."""
    if persona_id is None:
        raise ValidationError("Persona ID cannot be empty", "persona_id")

    persona_id = str(persona_id).strip()
    if not persona_id:
        raise ValidationError("Persona ID cannot be empty", "persona_id")

    if not _PERSONA_ID_PATTERN.match(persona_id):
        raise ValidationError(
            "Persona ID may only contain letters, digits, '-' and '_'", "persona_id"
        )

    return persona_id


def validate_namespace(namespace: Any) -> str:
    """Validate a vector index collection name."""
    if not namespace or not isinstance(namespace, str):
        raise ValidationError("Namespace cannot be empty", "namespace")

    if not _NAMESPACE_PATTERN.match(namespace) or '..' in namespace:
        raise ValidationError(
            "Namespace must be 3-63 characters of letters, digits, '.', '_' or '-', "
            "starting and ending with a letter or digit",
            "namespace",
        )

    return namespace


def persona_namespace(prefix: str, persona_id: Any) -> str:
    """Collection name for a persona, e.g. ``persona_42``."""
    persona_id = validate_persona_id(persona_id)
    return validate_namespace(f"{prefix}{persona_id}")


def validate_user_message(message: Any) -> str:
    """Validate a chat message."""
    if not isinstance(message, str):
        raise ValidationError("Message must be a string", "message")

    if not message.strip():
        raise ValidationError("Message cannot be empty", "message")

    return message


def validate_top_k(top_k: Any) -> int:
    """Validate a retrieval result count."""
    if isinstance(top_k, bool) or not isinstance(top_k, int):
        raise ValidationError("top_k must be an integer", "top_k")

    if top_k < 1:
        raise ValidationError("top_k must be positive", "top_k")

    return top_k
