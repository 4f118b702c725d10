"""Utility functions and helpers."""

from .async_utils import gather_with_concurrency, retry_with_backoff, run_in_thread
from .validation import (
    persona_namespace,
    validate_namespace,
    validate_persona_id,
    validate_top_k,
    validate_user_message,
)

__all__ = [
    "run_in_thread",
    "gather_with_concurrency",
    "retry_with_backoff",
    "persona_namespace",
    "validate_namespace",
    "validate_persona_id",
    "validate_top_k",
    "validate_user_message",
]
