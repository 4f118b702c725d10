"""Knowledge ingestion and grounded answering for personas."""

from typing import Any, List, Optional
from uuid import uuid4

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import (
    EmbeddingServiceError,
    GenerationError,
    PersonaRagError,
    VectorIndexError,
)
from ..models.knowledge import (
    CollectionStats,
    EmbeddedChunk,
    IngestionResult,
    Persona,
    RetrievedChunk,
    VectorPoint,
)
from ..utils.validation import (
    persona_namespace,
    validate_namespace,
    validate_persona_id,
    validate_top_k,
    validate_user_message,
)
from .chunking import Chunker
from .embeddings import EmbeddingManager
from .generation import GenerationManager
from .index import VectorIndex
from .prompts import build_prompt


class RAGPipeline(LoggerMixin):
    """Chunk, embed and index knowledge; retrieve it to ground answers.

    Holds the process-wide embedding, vector index and generation clients.
    Build it once at startup, ``initialize()`` it, share it across requests
    and ``close()`` it at shutdown. Any component can be injected.

    The pipeline keeps no per-request state. Callers must serialize
    ``ingest_knowledge`` calls for the same persona.
    """

    def __init__(
        self,
        settings: Settings,
        embedding_manager: Optional[EmbeddingManager] = None,
        vector_index: Optional[VectorIndex] = None,
        generation_manager: Optional[GenerationManager] = None,
        chunker: Optional[Chunker] = None,
    ):
        self.settings = settings
        self.embedding_manager = embedding_manager or EmbeddingManager(settings)
        self.vector_index = vector_index or VectorIndex(settings)
        self.generation_manager = generation_manager or GenerationManager(settings)
        self.chunker = chunker or Chunker.from_settings(settings)
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize embedding, vector index and generation clients."""
        try:
            await self.embedding_manager.initialize()
            await self.vector_index.initialize()
            await self.generation_manager.initialize()
        except PersonaRagError:
            await self.close()
            raise

        self._initialized = True
        self.logger.info("RAG pipeline initialized", chunker=repr(self.chunker))

    async def close(self) -> None:
        """Close all clients."""
        await self.generation_manager.close()
        await self.vector_index.close()
        await self.embedding_manager.close()
        self._initialized = False
        self.logger.info("RAG pipeline closed")

    async def __aenter__(self) -> "RAGPipeline":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def namespace_for(self, persona_id: Any) -> str:
        """Collection name for a persona, e.g. ``persona_42``."""
        return persona_namespace(self.settings.NAMESPACE_PREFIX, persona_id)

    async def ingest_knowledge(
        self,
        persona_id: Any,
        namespace: str,
        raw_text: Any,
    ) -> IngestionResult:
        """Replace a persona's knowledge base with ``raw_text``.

        All chunks are embedded before the namespace is touched, so an
        embedding failure leaves the previous knowledge in place. The
        namespace is then dropped, recreated and filled. A failure while
        writing raises VectorIndexError and may leave the namespace
        partially filled; the caller deletes and retries.

        Empty text indexes nothing and leaves the namespace dropped.
        """
        persona_id = validate_persona_id(persona_id)
        namespace = validate_namespace(namespace)

        chunks = self.chunker.chunk(raw_text)

        if not chunks:
            await self.vector_index.delete_collection(namespace)
            self.logger.info(
                "Knowledge base is empty, namespace cleared",
                persona_id=persona_id,
                namespace=namespace,
            )
            return IngestionResult(persona_id=persona_id, namespace=namespace, chunk_count=0)

        try:
            vectors = await self.embedding_manager.embed_batch([chunk.text for chunk in chunks])

            embedded = [
                EmbeddedChunk(
                    text=chunk.text,
                    vector=vector,
                    persona_id=persona_id,
                    ordinal=chunk.ordinal,
                )
                for chunk, vector in zip(chunks, vectors)
            ]
            dimension = embedded[0].dimension
            points = [VectorPoint.from_embedded_chunk(str(uuid4()), chunk) for chunk in embedded]

            await self.vector_index.delete_collection(namespace)
            await self.vector_index.ensure_collection(namespace, dimension)
            await self.vector_index.upsert(namespace, points)

        except (EmbeddingServiceError, VectorIndexError) as e:
            self.logger.error(
                "Knowledge ingestion failed",
                persona_id=persona_id,
                namespace=namespace,
                chunks=len(chunks),
                error=str(e),
            )
            raise

        self.logger.info(
            "Knowledge ingested",
            persona_id=persona_id,
            namespace=namespace,
            chunks=len(chunks),
            dimension=dimension,
        )
        return IngestionResult(
            persona_id=persona_id,
            namespace=namespace,
            chunk_count=len(points),
            dimension=dimension,
        )

    async def retrieve(
        self,
        namespace: str,
        query_vector: List[float],
        top_k: Optional[int] = None,
    ) -> List[RetrievedChunk]:
        """Search a namespace, degrading to no results when the index fails."""
        top_k = validate_top_k(top_k if top_k is not None else self.settings.RAG_TOP_K)

        try:
            return await self.vector_index.search(namespace, query_vector, top_k)
        except VectorIndexError as e:
            self.logger.warning(
                "Vector search failed, proceeding without knowledge",
                namespace=namespace,
                error=str(e),
            )
            return []

    async def answer(
        self,
        persona_id: Any,
        persona_name: str,
        persona_prompt: Optional[str],
        namespace: str,
        user_message: str,
        top_k: Optional[int] = None,
    ) -> str:
        """Answer a user message from the persona's knowledge.

        Query embedding and generation failures are raised; a failed search
        only removes the grounding.
        """
        persona_id = validate_persona_id(persona_id)
        namespace = validate_namespace(namespace)
        user_message = validate_user_message(user_message)

        query_vector = await self.embedding_manager.embed_one(user_message)
        chunks = await self.retrieve(namespace, query_vector, top_k)

        prompt = build_prompt(
            persona_name,
            persona_prompt,
            chunks,
            user_message,
            default_personality=self.settings.DEFAULT_PERSONALITY,
        )

        try:
            reply = await self.generation_manager.generate(prompt)
        except GenerationError as e:
            self.logger.error(
                "Answer generation failed", persona_id=persona_id, namespace=namespace, error=str(e)
            )
            raise

        self.logger.info(
            "Answer generated",
            persona_id=persona_id,
            namespace=namespace,
            chunks_used=len(chunks),
            top_score=chunks[0].score if chunks else None,
        )
        return reply

    async def answer_persona(
        self,
        persona: Persona,
        user_message: str,
        top_k: Optional[int] = None,
    ) -> str:
        """Answer for a persona record."""
        return await self.answer(
            persona.id,
            persona.name,
            persona.personality_prompt,
            persona.namespace,
            user_message,
            top_k=top_k,
        )

    async def delete_knowledge(self, namespace: str) -> bool:
        """Drop a persona's namespace; missing namespaces are fine."""
        namespace = validate_namespace(namespace)
        return await self.vector_index.delete_collection(namespace)

    async def knowledge_stats(self, namespace: str) -> CollectionStats:
        """Describe a persona's namespace."""
        namespace = validate_namespace(namespace)
        return await self.vector_index.collection_stats(namespace)
