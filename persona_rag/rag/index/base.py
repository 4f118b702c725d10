"""Shared plumbing for vector index operation handlers."""

import asyncio
from typing import Callable, TypeVar

from ...config.settings import Settings
from ...core.exceptions import VectorIndexError
from ...utils.async_utils import run_in_thread

T = TypeVar('T')

DISTANCE_METRIC = "cosine"
DIMENSION_KEY = "dimension"
SPACE_KEY = "hnsw:space"


class IndexOperations:
    """Base for handlers that call the blocking ChromaDB client."""

    def __init__(self, client, settings: Settings, logger):
        self.client = client
        self.settings = settings
        self.logger = logger

    async def _run(self, func: Callable[[], T], operation: str, namespace: str) -> T:
        """Run a client call off the event loop, mapping failures to VectorIndexError."""
        try:
            return await run_in_thread(func, self.settings.VECTOR_INDEX_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            self.logger.error(
                "Vector index call timed out", operation=operation, namespace=namespace
            )
            raise VectorIndexError(
                f"Vector index {operation} timed out after "
                f"{self.settings.VECTOR_INDEX_TIMEOUT_SECONDS}s",
                namespace,
                operation,
            )
        except VectorIndexError:
            raise
        except Exception as e:
            self.logger.error(
                "Vector index call failed", operation=operation, namespace=namespace, error=str(e)
            )
            raise VectorIndexError(f"Vector index {operation} failed: {e}", namespace, operation)
