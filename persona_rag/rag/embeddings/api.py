"""API-based embedding provider implementation."""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from ...core.exceptions import EmbeddingServiceError
from ...utils.async_utils import retry_with_backoff
from .base import EmbeddingProvider

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


class TransientEmbeddingError(EmbeddingServiceError):
    """Embedding request failure worth retrying (rate limit, server error)."""


class ApiEmbeddingProvider(EmbeddingProvider):
    """Embedding provider for OpenAI-compatible embedding endpoints."""

    def __init__(self, settings):
        super().__init__(settings)
        self._session: Optional[aiohttp.ClientSession] = None
        self._dimension: Optional[int] = None

    @property
    def provider_name(self) -> str:
        return "api"

    @property
    def endpoint(self) -> str:
        return f"{self.settings.EMBEDDING_API_BASE.rstrip('/')}/v1/embeddings"

    async def initialize(self) -> None:
        """Initialize API-based embedding provider."""
        if not self.settings.EMBEDDING_API_BASE:
            raise EmbeddingServiceError("EMBEDDING_API_BASE required for API provider", "api")

        # Create HTTP session
        timeout = aiohttp.ClientTimeout(total=self.settings.EMBEDDING_TIMEOUT_SECONDS)
        self._session = aiohttp.ClientSession(timeout=timeout)

        # A configured dimension is trusted; otherwise a probe request measures it
        try:
            dimension = self.settings.EMBEDDING_DIMENSIONS
            if not dimension:
                probe = await self._request_embeddings(["dimension probe"])
                dimension = len(probe[0])
            self._dimension = dimension
            self._initialized = True

            self.logger.info(
                "API embedding provider initialized",
                api_base=self.settings.EMBEDDING_API_BASE,
                model=self.settings.EMBEDDING_MODEL,
                dimension=dimension,
                probed=not self.settings.EMBEDDING_DIMENSIONS,
            )
        except Exception as e:
            await self.close()
            if isinstance(e, EmbeddingServiceError):
                raise
            raise EmbeddingServiceError(f"API embedding provider initialization failed: {e}", "api")

    async def close(self) -> None:
        """Close the API embedding provider."""
        if self._session:
            await self._session.close()
            self._session = None

        self._initialized = False
        self.logger.info("API embedding provider closed")

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings using API, retrying transient failures."""
        self._ensure_initialized()

        if not texts:
            return []

        if any(not text.strip() for text in texts):
            raise EmbeddingServiceError("Cannot embed empty text", "api")

        def _log_retry(attempt: int, error: BaseException) -> None:
            self.logger.warning(
                "Retrying embedding request",
                attempt=attempt,
                max_retries=self.settings.EMBEDDING_MAX_RETRIES,
                error=str(error),
            )

        try:
            embeddings = await retry_with_backoff(
                lambda: self._request_embeddings(texts),
                max_retries=self.settings.EMBEDDING_MAX_RETRIES,
                base_delay=self.settings.EMBEDDING_RETRY_BASE_DELAY,
                retry_on=(aiohttp.ClientError, asyncio.TimeoutError, TransientEmbeddingError),
                on_retry=_log_retry,
            )
        except EmbeddingServiceError as e:
            self.logger.error("Failed to embed texts via API", count=len(texts), error=str(e))
            raise
        except asyncio.TimeoutError:
            self.logger.error("Embedding request timed out", count=len(texts))
            raise EmbeddingServiceError(
                f"Embedding request timed out after {self.settings.EMBEDDING_TIMEOUT_SECONDS}s", "api"
            )
        except aiohttp.ClientError as e:
            self.logger.error("Embedding service unreachable", count=len(texts), error=str(e))
            raise EmbeddingServiceError(f"Embedding service unreachable: {e}", "api")

        self.logger.debug(
            "Texts embedded via API",
            count=len(texts),
            embedding_dim=len(embeddings[0]),
        )
        return embeddings

    async def _request_embeddings(self, texts: List[str]) -> List[List[float]]:
        """Send one embedding request and parse the response."""
        if not self._session:
            raise EmbeddingServiceError("HTTP session not initialized", "api")

        headers = {
            "Content-Type": "application/json"
        }

        if self.settings.EMBEDDING_API_KEY:
            headers["Authorization"] = f"Bearer {self.settings.EMBEDDING_API_KEY}"

        payload = {
            "model": self.settings.EMBEDDING_MODEL,
            "input": texts
        }

        async with self._session.post(self.endpoint, headers=headers, json=payload) as response:
            if response.status != 200:
                error_text = await response.text()
                message = f"API request failed: {response.status} - {error_text[:200]}"
                if response.status in RETRYABLE_STATUSES:
                    raise TransientEmbeddingError(message, "api")
                raise EmbeddingServiceError(message, "api")

            try:
                data = await response.json()
            except (aiohttp.ContentTypeError, ValueError) as e:
                raise EmbeddingServiceError(f"Malformed embedding response: {e}", "api")

        return self._parse_response(data, expected=len(texts))

    def _parse_response(self, data: Any, expected: int) -> List[List[float]]:
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or len(items) != expected:
            raise EmbeddingServiceError("Provider returned no usable vector", "api")

        # Items carry their input position; the order on the wire is not guaranteed
        if all(isinstance(item, dict) and "index" in item for item in items):
            items = sorted(items, key=lambda item: item["index"])

        vectors = []
        for item in items:
            raw = item.get("embedding") if isinstance(item, dict) else None
            vectors.append(self._coerce_vector(raw))
        return vectors

    def get_embedding_dimension(self) -> int:
        """Get the dimension of embeddings produced by the API model."""
        self._ensure_initialized()
        return self._dimension

    def get_model_info(self) -> Dict:
        """Get API provider model information."""
        info = super().get_model_info()
        info["api_base"] = self.settings.EMBEDDING_API_BASE
        return info
