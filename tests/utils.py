"""Test utilities and helper functions for Persona RAG tests."""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from unittest.mock import AsyncMock, MagicMock

from persona_rag.rag.embeddings.base import EmbeddingProvider
from persona_rag.rag.generation.base import GenerationProvider
from persona_rag.rag.prompts import INSUFFICIENT_KNOWLEDGE_REPLY, NO_KNOWLEDGE_BLOCK


def make_prose(word_count: int, sentence_length: int = 0) -> str:
    """Build text of ``word_count`` words, closing a sentence every ``sentence_length`` words."""
    words: List[str] = []
    for i in range(1, word_count + 1):
        word = f"word{i}"
        if sentence_length and i % sentence_length == 0:
            word += "."
        words.append(word)
    return " ".join(words)


class EmbeddingTestHelper:
    """Helper class for embedding testing."""

    @staticmethod
    def create_mock_embedding(dimensions: int = 8, value: float = 0.1) -> List[float]:
        """Create a mock embedding vector."""
        return [value] * dimensions

    @staticmethod
    def create_mock_embedding_response(
        vectors: Sequence[Sequence[float]],
        model: str = "text-embedding-3-small",
        reverse: bool = False,
    ) -> Dict[str, Any]:
        """Create an OpenAI-style embedding response, optionally out of order on the wire."""
        data = [
            {"object": "embedding", "index": i, "embedding": list(vector)}
            for i, vector in enumerate(vectors)
        ]
        if reverse:
            data.reverse()
        return {
            "object": "list",
            "data": data,
            "model": model,
            "usage": {"prompt_tokens": 5, "total_tokens": 5},
        }


ResponseOutcome = Union[BaseException, tuple]


class MockFactory:
    """Factory for creating various mocks used in tests."""

    @staticmethod
    def create_response_mock(status: int = 200, data: Any = None, text: str = "") -> AsyncMock:
        """Create a mock aiohttp response."""
        response_mock = AsyncMock()
        response_mock.status = status
        response_mock.json = AsyncMock(return_value=data)
        response_mock.text = AsyncMock(return_value=text)
        return response_mock

    @staticmethod
    def create_aiohttp_session_mock(responses: Iterable[ResponseOutcome]) -> MagicMock:
        """Create a mock aiohttp session answering successive posts.

        Each item is either ``(status, json_data)`` or an exception raised
        when the request is made.
        """
        class MockAsyncContextManager:
            def __init__(self, outcome):
                self.outcome = outcome

            async def __aenter__(self):
                if isinstance(self.outcome, BaseException):
                    raise self.outcome
                status, data = self.outcome
                return MockFactory.create_response_mock(status, data, text=str(data))

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                return None

        outcomes = iter(list(responses))

        session_mock = MagicMock()
        session_mock.post = MagicMock(side_effect=lambda *args, **kwargs: MockAsyncContextManager(next(outcomes)))
        session_mock.close = AsyncMock()
        return session_mock


class KeywordEmbeddingProvider(EmbeddingProvider):
    """Deterministic embeddings: one axis per keyword, counted and normalized.

    Texts sharing keywords are close under cosine similarity, which is
    enough to check retrieval ordering without a model.
    """

    def __init__(self, settings, keywords: Sequence[str]):
        super().__init__(settings)
        self.keywords = [keyword.lower() for keyword in keywords]
        self.calls: List[List[str]] = []

    @property
    def provider_name(self) -> str:
        return "keyword"

    async def initialize(self) -> None:
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        self._ensure_initialized()
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> List[float]:
        tokens = [token.strip(".,!?").lower() for token in text.split()]
        # Constant bias axis keeps unrelated text off the zero vector
        counts = [float(tokens.count(keyword)) for keyword in self.keywords] + [0.1]
        norm = math.sqrt(sum(value * value for value in counts))
        return [value / norm for value in counts]

    def get_embedding_dimension(self) -> int:
        return len(self.keywords) + 1


class StubGenerationProvider(GenerationProvider):
    """Follows the prompt's refusal instruction when no knowledge was retrieved."""

    def __init__(self, settings, reply: str = "Grounded answer"):
        super().__init__(settings)
        self.reply = reply
        self.prompts: List[str] = []

    @property
    def provider_name(self) -> str:
        return "stub"

    async def initialize(self) -> None:
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def generate(self, prompt: str) -> str:
        self._ensure_initialized()
        self.prompts.append(prompt)
        knowledge = prompt.split("Knowledge:\n", 1)[1].split("\n\nUser:", 1)[0]
        if knowledge == NO_KNOWLEDGE_BLOCK:
            return INSUFFICIENT_KNOWLEDGE_REPLY
        return self.reply

    @property
    def last_prompt(self) -> Optional[str]:
        return self.prompts[-1] if self.prompts else None
