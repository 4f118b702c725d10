"""Sentence-aligned, overlapping chunking of knowledge base text."""

from typing import Any, List, Optional

from ..config.settings import Settings
from ..core.exceptions import ChunkingError, ConfigurationError
from ..models.knowledge import KnowledgeChunk

SENTENCE_ENDINGS = ('.', '!', '?')

DEFAULT_MIN_WORDS = 500
DEFAULT_MAX_WORDS = 800
DEFAULT_OVERLAP_WORDS = 100


def _validate_bounds(min_words: int, max_words: int, overlap_words: int) -> None:
    if max_words < 1:
        raise ChunkingError("max_words must be at least 1", "max_words")
    if min_words < 0:
        raise ChunkingError("min_words cannot be negative", "min_words")
    if overlap_words < 0:
        raise ChunkingError("overlap_words cannot be negative", "overlap_words")
    if min_words > max_words:
        raise ChunkingError("min_words cannot exceed max_words", "min_words")


def _find_sentence_break(words: List[str], start: int, end: int, min_words: int) -> Optional[int]:
    """Scan backward from ``end`` for a sentence-ending word.

    Returns the index one past that word, or None when no word between
    ``start + min_words`` and ``end - 1`` closes a sentence.
    """
    for i in range(end - 1, start + min_words - 1, -1):
        if words[i].endswith(SENTENCE_ENDINGS):
            return i + 1
    return None


def chunk_text(
    text: Any,
    min_words: int = DEFAULT_MIN_WORDS,
    max_words: int = DEFAULT_MAX_WORDS,
    overlap_words: int = DEFAULT_OVERLAP_WORDS,
) -> List[KnowledgeChunk]:
    """Split text into overlapping chunks of at most ``max_words`` words.

    Text of ``max_words`` words or fewer comes back as a single chunk.
    Longer text is cut greedily: each chunk ends at the last sentence
    boundary that keeps it at least ``min_words`` long, or at ``max_words``
    when there is none, and the next chunk starts ``overlap_words`` before
    that end. Every step advances by at least one word, so the loop ends
    for any valid bounds.

    Non-string, empty and whitespace-only input yields no chunks.
    """
    _validate_bounds(min_words, max_words, overlap_words)

    if not isinstance(text, str):
        return []

    words = text.split()
    total = len(words)
    if total == 0:
        return []

    if total <= max_words:
        return [KnowledgeChunk(text=" ".join(words), ordinal=0, start_word=0, end_word=total)]

    chunks: List[KnowledgeChunk] = []
    start = 0

    while start < total:
        end = min(start + max_words, total)

        if end < total:
            sentence_break = _find_sentence_break(words, start, end, min_words)
            if sentence_break is not None:
                end = sentence_break

        chunks.append(
            KnowledgeChunk(
                text=" ".join(words[start:end]),
                ordinal=len(chunks),
                start_word=start,
                end_word=end,
            )
        )

        if end >= total:
            break

        start = max(start + 1, end - overlap_words)

    return chunks


class Chunker:
    """Chunker bound to configured word bounds."""

    def __init__(
        self,
        min_words: int = DEFAULT_MIN_WORDS,
        max_words: int = DEFAULT_MAX_WORDS,
        overlap_words: int = DEFAULT_OVERLAP_WORDS,
    ) -> None:
        _validate_bounds(min_words, max_words, overlap_words)
        self.min_words = min_words
        self.max_words = max_words
        self.overlap_words = overlap_words

    @classmethod
    def from_settings(cls, settings: Settings) -> "Chunker":
        """Create a chunker from the CHUNK_* settings."""
        try:
            return cls(
                min_words=settings.CHUNK_MIN_WORDS,
                max_words=settings.CHUNK_MAX_WORDS,
                overlap_words=settings.CHUNK_OVERLAP_WORDS,
            )
        except ChunkingError as e:
            parameter = e.details.get("parameter", "")
            raise ConfigurationError(
                f"Invalid chunk settings: {e.message}", f"CHUNK_{parameter.upper()}"
            )

    def chunk(self, text: Any) -> List[KnowledgeChunk]:
        """Split text using this chunker's bounds."""
        return chunk_text(
            text,
            min_words=self.min_words,
            max_words=self.max_words,
            overlap_words=self.overlap_words,
        )

    def __repr__(self) -> str:
        return (
            f"Chunker(min_words={self.min_words}, max_words={self.max_words}, "
            f"overlap_words={self.overlap_words})"
        )
