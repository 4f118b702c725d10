"""Main embedding manager that coordinates between providers."""

from functools import partial
from typing import Any, Dict, List, Optional

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import EmbeddingServiceError
from ...utils.async_utils import gather_with_concurrency
from .api import ApiEmbeddingProvider
from .base import EmbeddingProvider
from .local import LocalEmbeddingProvider


class EmbeddingManager(LoggerMixin):
    """Turns chunk and query text into fixed-length vectors."""

    def __init__(self, settings: Settings, provider: Optional[EmbeddingProvider] = None):
        self.settings = settings
        self.provider: Optional[EmbeddingProvider] = provider
        self._dimension: Optional[int] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the embedding manager with appropriate provider."""
        try:
            # Select provider based on settings unless one was injected
            if self.provider is None:
                if self.settings.EMBEDDING_PROVIDER == "api":
                    self.provider = ApiEmbeddingProvider(self.settings)
                else:
                    self.provider = LocalEmbeddingProvider(self.settings)

            if not self.provider.is_initialized:
                await self.provider.initialize()
            self._dimension = self.provider.get_embedding_dimension()
            self._initialized = True

            self.logger.info(
                "Embedding manager initialized",
                provider=self.provider.provider_name,
                model=self.settings.EMBEDDING_MODEL,
                dimension=self._dimension,
                max_concurrency=self.settings.EMBEDDING_MAX_CONCURRENCY,
            )

        except EmbeddingServiceError:
            self.logger.error("Failed to initialize embedding manager")
            raise
        except Exception as e:
            self.logger.error("Failed to initialize embedding manager", error=str(e))
            raise EmbeddingServiceError(f"Embedding manager initialization failed: {e}")

    async def close(self) -> None:
        """Close the embedding manager."""
        if self.provider:
            await self.provider.close()
            self.provider = None

        self._initialized = False
        self.logger.info("Embedding manager closed")

    def _ensure_initialized(self) -> None:
        """Ensure the embedding manager is initialized."""
        if not self._initialized or not self.provider:
            raise EmbeddingServiceError("Embedding manager not initialized")

    @property
    def dimension(self) -> int:
        """Vector length produced by the active provider."""
        self._ensure_initialized()
        return self._dimension

    async def embed_one(self, text: str) -> List[float]:
        """Embed a single chunk or query."""
        self._ensure_initialized()

        if not isinstance(text, str) or not text.strip():
            raise EmbeddingServiceError("Cannot embed empty text", self.provider.provider_name)

        try:
            vector = await self.provider.embed_text(text)
        except EmbeddingServiceError:
            raise
        except Exception as e:
            self.logger.error("Embedding provider failed", error=str(e))
            raise EmbeddingServiceError(f"Embedding failed: {e}", self.provider.provider_name)

        if len(vector) != self._dimension:
            raise EmbeddingServiceError(
                f"Provider returned a {len(vector)}-dimensional vector, expected {self._dimension}",
                self.provider.provider_name,
            )
        return vector

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed texts one request at a time, at most EMBEDDING_MAX_CONCURRENCY in flight.

        Results keep input order. The first failure cancels the remaining
        requests and is raised; no partial result is returned.
        """
        self._ensure_initialized()

        if not texts:
            return []

        vectors = await gather_with_concurrency(
            [partial(self.embed_one, text) for text in texts],
            max_concurrency=self.settings.EMBEDDING_MAX_CONCURRENCY,
        )

        self.logger.debug("Batch embedded", count=len(vectors), dimension=self._dimension)
        return vectors

    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings produced by the model."""
        return self.dimension

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        self._ensure_initialized()
        return self.provider.get_model_info()
