"""Local sentence-transformers embedding provider implementation."""

import asyncio
from typing import Dict, List, Optional

import numpy as np

try:
    from sentence_transformers import SentenceTransformer
except ImportError:
    SentenceTransformer = None

from ...core.exceptions import EmbeddingServiceError
from ...utils.async_utils import run_in_thread
from .base import EmbeddingProvider


class LocalEmbeddingProvider(EmbeddingProvider):
    """Local sentence-transformers embedding provider."""

    def __init__(self, settings):
        super().__init__(settings)
        self.model: Optional[SentenceTransformer] = None

    @property
    def provider_name(self) -> str:
        return "local"

    async def initialize(self) -> None:
        """Initialize local sentence-transformers model."""
        if SentenceTransformer is None:
            raise EmbeddingServiceError(
                "sentence-transformers not available. Install with: pip install 'persona-rag[local]'",
                "local",
            )

        try:
            # Load model in a thread pool to avoid blocking
            loop = asyncio.get_running_loop()
            self.model = await loop.run_in_executor(
                None,
                lambda: SentenceTransformer(self.settings.EMBEDDING_MODEL)
            )

            dimension = self.model.get_sentence_embedding_dimension()
            expected = self.settings.EMBEDDING_DIMENSIONS
            if expected and dimension != expected:
                raise EmbeddingServiceError(
                    f"Model produces {dimension}-dimensional vectors, "
                    f"EMBEDDING_DIMENSIONS is {expected}",
                    "local",
                )

            self._initialized = True

            self.logger.info(
                "Local embedding provider initialized",
                model=self.settings.EMBEDDING_MODEL,
                dimensions=dimension
            )

        except EmbeddingServiceError:
            self.model = None
            raise
        except Exception as e:
            self.model = None
            self.logger.error("Failed to initialize local embedding provider", error=str(e))
            raise EmbeddingServiceError(f"Local embedding provider initialization failed: {e}", "local")

    async def close(self) -> None:
        """Close the local embedding provider."""
        self.model = None
        self._initialized = False
        self.logger.info("Local embedding provider closed")

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings using local model."""
        self._ensure_initialized()

        if not texts:
            return []

        if any(not text.strip() for text in texts):
            raise EmbeddingServiceError("Cannot embed empty text", "local")

        try:
            raw = await run_in_thread(
                lambda: np.asarray(
                    self.model.encode(texts, convert_to_tensor=False), dtype=np.float64
                ),
                self.settings.EMBEDDING_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            self.logger.error("Local embedding timed out", count=len(texts))
            raise EmbeddingServiceError(
                f"Local embedding timed out after {self.settings.EMBEDDING_TIMEOUT_SECONDS}s", "local"
            )
        except Exception as e:
            self.logger.error("Failed to embed texts locally", count=len(texts), error=str(e))
            raise EmbeddingServiceError(f"Failed to embed texts locally: {e}", "local")

        if raw.ndim != 2:
            raise EmbeddingServiceError("Provider returned no usable vector", "local")

        embeddings = [self._coerce_vector(row.tolist()) for row in raw]
        if len(embeddings) != len(texts):
            raise EmbeddingServiceError("Provider returned no usable vector", "local")

        self.logger.debug(
            "Texts embedded locally",
            count=len(texts),
            embedding_dim=len(embeddings[0])
        )
        return embeddings

    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings produced by the local model."""
        self._ensure_initialized()

        try:
            return self.model.get_sentence_embedding_dimension()
        except Exception as e:
            self.logger.error("Failed to get local embedding dimension", error=str(e))
            raise EmbeddingServiceError(f"Failed to get embedding dimension: {e}", "local")

    def get_model_info(self) -> Dict:
        """Get local provider model information."""
        info = super().get_model_info()
        if self.model:
            info["max_sequence_length"] = getattr(self.model, 'max_seq_length', 'unknown')
        return info
