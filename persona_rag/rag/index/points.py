"""Point write operations handler for the vector index."""

from typing import Any, Dict, List

from ...config.settings import Settings
from ...core.exceptions import VectorIndexError
from ...models.knowledge import VectorPoint
from .base import IndexOperations
from .collections import CollectionOperations


class PointOperations(IndexOperations):
    """Writes embedded chunks into a collection in bounded batches."""

    def __init__(self, client, collections: CollectionOperations, settings: Settings, logger):
        super().__init__(client, settings, logger)
        self.collections = collections

    async def upsert(self, namespace: str, points: List[VectorPoint]) -> int:
        """Upsert points, creating the collection first when needed.

        Every vector must have the collection's declared length. Points are
        written VECTOR_UPSERT_BATCH_SIZE at a time; a failed batch raises
        VectorIndexError and leaves earlier batches written.
        """
        if not points:
            return 0

        dimension = len(points[0].vector)
        for point in points:
            if len(point.vector) != dimension:
                raise VectorIndexError(
                    f"Point {point.id} has {len(point.vector)} dimensions, expected {dimension}",
                    namespace,
                    "upsert",
                )

        collection = await self.collections.ensure_collection(namespace, dimension)

        batch_size = self.settings.VECTOR_UPSERT_BATCH_SIZE
        for offset in range(0, len(points), batch_size):
            batch = points[offset:offset + batch_size]
            ids = [point.id for point in batch]
            embeddings = [point.vector for point in batch]
            documents = [str(point.payload.get("text", "")) for point in batch]
            metadatas = [self._metadata(namespace, point.payload) for point in batch]

            await self._run(
                lambda: collection.upsert(
                    ids=ids,
                    embeddings=embeddings,
                    documents=documents,
                    metadatas=metadatas,
                ),
                "upsert",
                namespace,
            )
            self.logger.debug(
                "Upserted batch", namespace=namespace, offset=offset, size=len(batch)
            )

        self.logger.info("Points upserted", namespace=namespace, count=len(points))
        return len(points)

    @staticmethod
    def _metadata(namespace: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Chunk text lives in the collection's documents; metadata holds the rest
        metadata = {key: value for key, value in payload.items() if key != "text"}
        metadata["namespace"] = namespace
        return metadata
