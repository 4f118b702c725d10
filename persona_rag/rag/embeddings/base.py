"""Abstract base classes for embedding providers."""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import EmbeddingServiceError


class EmbeddingProvider(ABC, LoggerMixin):
    """Abstract base class for embedding providers."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the embedding provider."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the embedding provider and clean up resources."""
        pass

    @abstractmethod
    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts."""
        pass

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings produced by this provider."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of this provider."""
        pass

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _ensure_initialized(self) -> None:
        """Ensure the provider is initialized."""
        if not self._initialized:
            raise EmbeddingServiceError(
                f"{self.provider_name} provider not initialized", self.provider_name
            )

    def _coerce_vector(self, raw: Any) -> List[float]:
        """Turn a provider response item into a vector, rejecting unusable ones."""
        if not isinstance(raw, (list, tuple)) or not raw:
            raise EmbeddingServiceError("Provider returned no usable vector", self.provider_name)

        vector: List[float] = []
        for value in raw:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise EmbeddingServiceError(
                    "Provider returned a non-numeric vector component", self.provider_name
                )
            value = float(value)
            if not math.isfinite(value):
                raise EmbeddingServiceError(
                    "Provider returned a non-finite vector component", self.provider_name
                )
            vector.append(value)
        return vector

    async def embed_text(self, text: str) -> List[float]:
        """Generate embedding for a single text."""
        if not text.strip():
            raise EmbeddingServiceError("Cannot embed empty text", self.provider_name)

        embeddings = await self.embed_texts([text])
        if len(embeddings) != 1:
            raise EmbeddingServiceError("Provider returned no usable vector", self.provider_name)
        return embeddings[0]

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        self._ensure_initialized()

        return {
            "model_name": self.settings.EMBEDDING_MODEL,
            "provider": self.provider_name,
            "dimension": self.get_embedding_dimension(),
        }
