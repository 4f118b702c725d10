"""Tests for the RAG pipeline orchestration."""

from unittest.mock import AsyncMock, call

import pytest

from persona_rag.config.settings import Settings
from persona_rag.core.exceptions import (
    EmbeddingServiceError,
    GenerationError,
    ValidationError,
    VectorIndexError,
)
from persona_rag.models.knowledge import Persona, RetrievedChunk
from persona_rag.rag.chunking import Chunker
from persona_rag.rag.generation import GenerationManager
from persona_rag.rag.pipeline import RAGPipeline
from persona_rag.rag.prompts import INSUFFICIENT_KNOWLEDGE_REPLY
from tests.utils import StubGenerationProvider, make_prose


@pytest.fixture
def pipeline(test_settings, mock_embedding_manager, mock_vector_index, mock_generation_manager):
    """Pipeline with mocked components and small chunk bounds."""
    return RAGPipeline(
        test_settings,
        embedding_manager=mock_embedding_manager,
        vector_index=mock_vector_index,
        generation_manager=mock_generation_manager,
        chunker=Chunker(min_words=5, max_words=10, overlap_words=2),
    )


class TestPipelineLifecycle:
    """Test pipeline startup and shutdown."""

    @pytest.mark.asyncio
    async def test_initialize_and_close(self, pipeline, mock_embedding_manager, mock_vector_index, mock_generation_manager):
        """All components are initialized and closed."""
        async with pipeline:
            assert pipeline.is_initialized
            mock_embedding_manager.initialize.assert_awaited_once()
            mock_vector_index.initialize.assert_awaited_once()
            mock_generation_manager.initialize.assert_awaited_once()

        assert not pipeline.is_initialized
        mock_embedding_manager.close.assert_awaited_once()
        mock_vector_index.close.assert_awaited_once()
        mock_generation_manager.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_initialize_closes_components(self, pipeline, mock_vector_index, mock_embedding_manager):
        """A component failing to start closes what was opened."""
        mock_vector_index.initialize.side_effect = VectorIndexError("unreachable")

        with pytest.raises(VectorIndexError):
            await pipeline.initialize()

        assert not pipeline.is_initialized
        mock_embedding_manager.close.assert_awaited_once()

    def test_components_built_from_settings(self, test_settings: Settings):
        """Components not injected are created from settings."""
        pipeline = RAGPipeline(test_settings)

        assert pipeline.chunker.max_words == test_settings.CHUNK_MAX_WORDS
        assert pipeline.embedding_manager.settings is test_settings

    def test_namespace_for(self, pipeline):
        """Namespaces are the configured prefix plus the persona ID."""
        assert pipeline.namespace_for(42) == "persona_42"
        assert pipeline.namespace_for("abc-1") == "persona_abc-1"

    def test_namespace_for_rejects_bad_ids(self, pipeline):
        """Persona IDs that cannot form a collection name are rejected."""
        with pytest.raises(ValidationError):
            pipeline.namespace_for("../etc")


class TestIngestKnowledge:
    """Test knowledge ingestion."""

    @pytest.mark.asyncio
    async def test_ingest_replaces_namespace(self, pipeline, mock_embedding_manager, mock_vector_index):
        """Chunks are embedded, the namespace dropped and recreated, then filled."""
        text = make_prose(25, sentence_length=4)

        result = await pipeline.ingest_knowledge("42", "persona_42", text)

        chunk_texts = [chunk.text for chunk in pipeline.chunker.chunk(text)]
        mock_embedding_manager.embed_batch.assert_awaited_once_with(chunk_texts)
        mock_vector_index.delete_collection.assert_awaited_once_with("persona_42")
        mock_vector_index.ensure_collection.assert_awaited_once_with("persona_42", 3)

        namespace, points = mock_vector_index.upsert.call_args.args
        assert namespace == "persona_42"
        assert [point.payload["text"] for point in points] == chunk_texts
        assert [point.payload["ordinal"] for point in points] == list(range(len(chunk_texts)))
        assert all(point.payload["persona_id"] == "42" for point in points)
        assert len({point.id for point in points}) == len(points)

        assert result.chunk_count == len(chunk_texts)
        assert result.dimension == 3
        assert result.namespace == "persona_42"

    @pytest.mark.asyncio
    async def test_embedding_happens_before_drop(self, pipeline, mock_embedding_manager, mock_vector_index):
        """The previous knowledge is dropped only after every chunk is embedded."""
        manager = AsyncMock()
        manager.attach_mock(mock_embedding_manager.embed_batch, "embed_batch")
        manager.attach_mock(mock_vector_index.delete_collection, "delete_collection")
        manager.attach_mock(mock_vector_index.upsert, "upsert")

        await pipeline.ingest_knowledge("42", "persona_42", make_prose(25))

        names = [name for name, _, _ in manager.mock_calls]
        assert names == ["embed_batch", "delete_collection", "upsert"]

    @pytest.mark.asyncio
    async def test_empty_knowledge_base(self, pipeline, mock_embedding_manager, mock_vector_index):
        """Empty text clears the namespace without embedding or upserting."""
        result = await pipeline.ingest_knowledge("42", "persona_42", "")

        assert result.chunk_count == 0
        assert result.dimension is None
        mock_embedding_manager.embed_batch.assert_not_awaited()
        mock_vector_index.upsert.assert_not_awaited()
        mock_vector_index.delete_collection.assert_awaited_once_with("persona_42")

    @pytest.mark.asyncio
    async def test_embedding_failure_keeps_previous_knowledge(self, pipeline, mock_embedding_manager, mock_vector_index):
        """An embedding failure is raised before the namespace is touched."""
        mock_embedding_manager.embed_batch.side_effect = EmbeddingServiceError("quota exceeded")

        with pytest.raises(EmbeddingServiceError):
            await pipeline.ingest_knowledge("42", "persona_42", make_prose(25))

        mock_vector_index.delete_collection.assert_not_awaited()
        mock_vector_index.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upsert_failure_raises(self, pipeline, mock_vector_index):
        """A write failure surfaces as VectorIndexError."""
        mock_vector_index.upsert.side_effect = VectorIndexError("write failed", "persona_42", "upsert")

        with pytest.raises(VectorIndexError):
            await pipeline.ingest_knowledge("42", "persona_42", make_prose(25))

    @pytest.mark.asyncio
    async def test_invalid_namespace(self, pipeline, mock_vector_index):
        """Malformed namespaces are rejected before any work."""
        with pytest.raises(ValidationError):
            await pipeline.ingest_knowledge("42", "x", "some text")

        mock_vector_index.delete_collection.assert_not_awaited()


class TestAnswer:
    """Test grounded answering."""

    @pytest.mark.asyncio
    async def test_answer_uses_retrieved_knowledge(
        self, pipeline, mock_embedding_manager, mock_vector_index, mock_generation_manager, sample_chunks
    ):
        """The question is embedded, knowledge retrieved and the prompt generated from it."""
        mock_vector_index.search.return_value = sample_chunks

        reply = await pipeline.answer("42", "Alice", "Warm.", "persona_42", "When did you open?")

        assert reply == "Generated answer"
        mock_embedding_manager.embed_one.assert_awaited_once_with("When did you open?")
        mock_vector_index.search.assert_awaited_once_with("persona_42", [0.1, 0.2, 0.3], 3)
        prompt = mock_generation_manager.generate.call_args.args[0]
        assert "You are Alice." in prompt
        assert "[Chunk 1] (relevance: 0.910)\nAlice founded the bakery in 1998." in prompt

    @pytest.mark.asyncio
    async def test_answer_top_k_override(self, pipeline, mock_vector_index):
        """An explicit top_k replaces RAG_TOP_K."""
        await pipeline.answer("42", "Alice", None, "persona_42", "Hi", top_k=5)

        assert mock_vector_index.search.call_args.args[2] == 5

    @pytest.mark.asyncio
    async def test_search_failure_degrades_to_no_knowledge(self, pipeline, mock_vector_index, mock_generation_manager):
        """A failed search answers without grounding instead of failing."""
        mock_vector_index.search.side_effect = VectorIndexError("timeout", "persona_42", "search")

        reply = await pipeline.answer("42", "Alice", None, "persona_42", "Hi")

        assert reply == "Generated answer"
        prompt = mock_generation_manager.generate.call_args.args[0]
        assert "No relevant knowledge found." in prompt

    @pytest.mark.asyncio
    async def test_embedding_failure_raises(self, pipeline, mock_embedding_manager, mock_generation_manager):
        """A failed question embedding is raised."""
        mock_embedding_manager.embed_one.side_effect = EmbeddingServiceError("down")

        with pytest.raises(EmbeddingServiceError):
            await pipeline.answer("42", "Alice", None, "persona_42", "Hi")
        mock_generation_manager.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generation_failure_raises(self, pipeline, mock_generation_manager):
        """A failed generation is raised."""
        mock_generation_manager.generate.side_effect = GenerationError("no candidate")

        with pytest.raises(GenerationError):
            await pipeline.answer("42", "Alice", None, "persona_42", "Hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   ", None])
    async def test_blank_message_rejected(self, pipeline, mock_embedding_manager, message):
        """Blank messages are rejected before any provider call."""
        with pytest.raises(ValidationError):
            await pipeline.answer("42", "Alice", None, "persona_42", message)
        mock_embedding_manager.embed_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_namespace_yields_refusal(
        self, test_settings, mock_embedding_manager, mock_vector_index
    ):
        """With nothing indexed, a model that follows the prompt refuses."""
        generator = StubGenerationProvider(test_settings)
        pipeline = RAGPipeline(
            test_settings,
            embedding_manager=mock_embedding_manager,
            vector_index=mock_vector_index,
            generation_manager=GenerationManager(test_settings, provider=generator),
        )
        await pipeline.initialize()

        reply = await pipeline.answer("42", "Alice", None, "persona_42", "What is the capital of Peru?")

        assert reply
        assert INSUFFICIENT_KNOWLEDGE_REPLY in reply
        assert "No relevant knowledge found." in generator.last_prompt

    @pytest.mark.asyncio
    async def test_answer_persona(self, pipeline, mock_vector_index):
        """Persona records supply name, personality and namespace."""
        persona = Persona(id="7", name="Zed", personality_prompt="  ", namespace="persona_7")

        await pipeline.answer_persona(persona, "Hi")

        assert mock_vector_index.search.call_args.args[0] == "persona_7"


class TestKnowledgeManagement:
    """Test namespace deletion and stats."""

    @pytest.mark.asyncio
    async def test_delete_knowledge(self, pipeline, mock_vector_index):
        """Deleting delegates to the index."""
        assert await pipeline.delete_knowledge("persona_42") is True
        assert mock_vector_index.delete_collection.await_args_list == [call("persona_42")]

    @pytest.mark.asyncio
    async def test_retrieve_returns_chunks(self, pipeline, mock_vector_index):
        """Retrieval passes results through."""
        chunks = [RetrievedChunk(text="a", score=0.5)]
        mock_vector_index.search.return_value = chunks

        assert await pipeline.retrieve("persona_42", [0.1, 0.2, 0.3]) == chunks

    @pytest.mark.asyncio
    async def test_retrieve_rejects_bad_top_k(self, pipeline):
        """top_k must be a positive integer."""
        with pytest.raises(ValidationError):
            await pipeline.retrieve("persona_42", [0.1], top_k=0)
