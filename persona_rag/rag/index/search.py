"""Similarity search handler for the vector index."""

from typing import List

from ...config.settings import Settings
from ...models.knowledge import RetrievedChunk
from .base import IndexOperations
from .collections import CollectionOperations


class SearchOperations(IndexOperations):
    """Top-K cosine similarity search within one collection."""

    def __init__(self, client, collections: CollectionOperations, settings: Settings, logger):
        super().__init__(client, settings, logger)
        self.collections = collections

    async def search(
        self,
        namespace: str,
        query_vector: List[float],
        top_k: int,
    ) -> List[RetrievedChunk]:
        """Return at most ``top_k`` chunks, highest similarity first.

        A missing or empty collection yields an empty list.
        """
        collection = await self.collections.get_collection(namespace)
        if collection is None:
            self.logger.debug("Search on missing collection", namespace=namespace)
            return []

        count = await self._run(collection.count, "count", namespace)
        if count == 0:
            self.logger.debug("Search on empty collection", namespace=namespace)
            return []

        results = await self._run(
            lambda: collection.query(
                query_embeddings=[query_vector],
                n_results=min(top_k, count),
                include=["documents", "distances"],
            ),
            "search",
            namespace,
        )

        documents = (results.get("documents") or [[]])[0] or []
        distances = (results.get("distances") or [[]])[0] or []

        # Cosine distance is 1 - cosine similarity
        retrieved = [
            RetrievedChunk(text=document or "", score=1.0 - float(distance))
            for document, distance in zip(documents, distances)
        ]
        retrieved.sort(key=lambda chunk: chunk.score, reverse=True)

        self.logger.info(
            "Vector search completed",
            namespace=namespace,
            top_k=top_k,
            results=len(retrieved),
        )
        return retrieved[:top_k]
