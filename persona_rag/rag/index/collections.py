"""Collection lifecycle and statistics handler for the vector index."""

from typing import Optional

from chromadb.errors import NotFoundError

from ...core.exceptions import VectorIndexError
from ...models.knowledge import CollectionStats
from .base import DIMENSION_KEY, DISTANCE_METRIC, SPACE_KEY, IndexOperations


class CollectionOperations(IndexOperations):
    """Creates, inspects and drops per-persona collections."""

    async def ensure_collection(self, namespace: str, dimension: int):
        """Get or create a cosine collection declared for ``dimension``-length vectors."""
        if dimension < 1:
            raise VectorIndexError("Collection dimension must be positive", namespace, "ensure_collection")

        collection = await self._run(
            lambda: self.client.get_or_create_collection(
                name=namespace,
                metadata={SPACE_KEY: DISTANCE_METRIC, DIMENSION_KEY: dimension},
            ),
            "ensure_collection",
            namespace,
        )

        declared = (collection.metadata or {}).get(DIMENSION_KEY)
        if declared is not None and int(declared) != dimension:
            raise VectorIndexError(
                f"Collection is declared for {declared}-dimensional vectors, got {dimension}",
                namespace,
                "ensure_collection",
            )

        self.logger.debug("Collection ready", namespace=namespace, dimension=dimension)
        return collection

    async def get_collection(self, namespace: str):
        """Return the collection, or None when it does not exist."""

        def _get():
            try:
                return self.client.get_collection(name=namespace)
            except NotFoundError:
                return None

        return await self._run(_get, "get_collection", namespace)

    async def delete_collection(self, namespace: str) -> bool:
        """Drop a collection. A missing collection is not an error.

        Returns True when a collection was dropped.
        """

        def _delete() -> bool:
            try:
                self.client.delete_collection(name=namespace)
            except NotFoundError:
                return False
            return True

        deleted = await self._run(_delete, "delete_collection", namespace)
        if deleted:
            self.logger.info("Collection deleted", namespace=namespace)
        else:
            self.logger.info("Collection already absent, nothing to delete", namespace=namespace)
        return deleted

    async def collection_stats(self, namespace: str) -> CollectionStats:
        """Describe a collection."""
        collection = await self.get_collection(namespace)
        if collection is None:
            return CollectionStats(namespace=namespace, exists=False)

        count = await self._run(collection.count, "count", namespace)
        metadata = collection.metadata or {}
        dimension: Optional[int] = metadata.get(DIMENSION_KEY)

        return CollectionStats(
            namespace=namespace,
            exists=True,
            point_count=count,
            dimension=int(dimension) if dimension is not None else None,
            distance=metadata.get(SPACE_KEY, "l2"),
        )
