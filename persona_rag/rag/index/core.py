"""Core vector index with client lifecycle and coordination."""

from typing import List, Optional

import chromadb
from chromadb.config import Settings as ChromaSettings

from ...config.logging import LoggerMixin
from ...config.settings import Settings
from ...core.exceptions import VectorIndexError
from ...models.knowledge import CollectionStats, RetrievedChunk, VectorPoint
from .collections import CollectionOperations
from .points import PointOperations
from .search import SearchOperations


class VectorIndex(LoggerMixin):
    """Per-persona ChromaDB collections for chunk storage and similarity search."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self.client = client
        self._initialized = False

        # Delegate operation handlers
        self._collections: Optional[CollectionOperations] = None
        self._points: Optional[PointOperations] = None
        self._search: Optional[SearchOperations] = None

    async def initialize(self) -> None:
        """Connect to ChromaDB and set up operation handlers."""
        try:
            if self.client is None:
                self.client = self._create_client()

            self._collections = CollectionOperations(self.client, self.settings, self.logger)
            self._points = PointOperations(
                self.client, self._collections, self.settings, self.logger
            )
            self._search = SearchOperations(
                self.client, self._collections, self.settings, self.logger
            )

            self._initialized = True

            self.logger.info(
                "Vector index initialized",
                mode=self.settings.VECTOR_INDEX_MODE,
                target=self._target(),
            )

        except VectorIndexError:
            raise
        except Exception as e:
            self.logger.error("Failed to initialize vector index", error=str(e))
            raise VectorIndexError(f"Vector index initialization failed: {e}")

    def _create_client(self):
        chroma_settings = ChromaSettings(anonymized_telemetry=False)

        if self.settings.VECTOR_INDEX_MODE == "http":
            return chromadb.HttpClient(
                host=self.settings.CHROMADB_HOST,
                port=self.settings.CHROMADB_PORT,
                ssl=self.settings.CHROMADB_SSL,
                settings=chroma_settings,
            )

        self.settings.CHROMADB_PERSIST_DIRECTORY.mkdir(parents=True, exist_ok=True)
        return chromadb.PersistentClient(
            path=str(self.settings.CHROMADB_PERSIST_DIRECTORY),
            settings=chroma_settings,
        )

    def _target(self) -> str:
        if self.settings.VECTOR_INDEX_MODE == "http":
            return f"{self.settings.CHROMADB_HOST}:{self.settings.CHROMADB_PORT}"
        return str(self.settings.CHROMADB_PERSIST_DIRECTORY)

    async def close(self) -> None:
        """Close the vector index."""
        self.client = None
        self._collections = None
        self._points = None
        self._search = None
        self._initialized = False
        self.logger.info("Vector index closed")

    def _ensure_initialized(self) -> None:
        """Ensure the index is initialized."""
        if not self._initialized or not self._collections or not self._points or not self._search:
            raise VectorIndexError("Vector index not initialized")

    # Collection Operations - delegated to CollectionOperations
    async def ensure_collection(self, namespace: str, dimension: int) -> None:
        """Create the collection if absent; idempotent."""
        self._ensure_initialized()
        await self._collections.ensure_collection(namespace, dimension)

    async def delete_collection(self, namespace: str) -> bool:
        """Drop the collection; a missing collection counts as success."""
        self._ensure_initialized()
        return await self._collections.delete_collection(namespace)

    async def collection_stats(self, namespace: str) -> CollectionStats:
        """Describe the collection."""
        self._ensure_initialized()
        return await self._collections.collection_stats(namespace)

    # Point Operations - delegated to PointOperations
    async def upsert(self, namespace: str, points: List[VectorPoint]) -> int:
        """Write points in batches, creating the collection first."""
        self._ensure_initialized()
        return await self._points.upsert(namespace, points)

    # Search Operations - delegated to SearchOperations
    async def search(
        self,
        namespace: str,
        query_vector: List[float],
        top_k: int,
    ) -> List[RetrievedChunk]:
        """Top-K most similar chunks, highest score first."""
        self._ensure_initialized()
        return await self._search.search(namespace, query_vector, top_k)
