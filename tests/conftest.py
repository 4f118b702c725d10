"""Pytest configuration and shared fixtures for Persona RAG tests."""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from persona_rag.config.settings import Settings
from persona_rag.models.knowledge import RetrievedChunk


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with temporary directories and no .env file."""
    return Settings(
        _env_file=None,

        # Server settings
        SERVER_HOST="127.0.0.1",
        SERVER_PORT=8011,
        DEBUG=True,
        LOG_DIR=temp_dir / "logs",

        # Embedding settings (mock)
        EMBEDDING_PROVIDER="api",
        EMBEDDING_API_BASE="http://mock-embedding-api:4000",
        EMBEDDING_MODEL="text-embedding-3-small",
        EMBEDDING_API_KEY="test-key",
        EMBEDDING_MAX_RETRIES=2,
        EMBEDDING_RETRY_BASE_DELAY=0.0,

        # Generation settings (mock)
        GENERATION_PROVIDER="echo",
        GENERATION_API_BASE="http://mock-generation-api:4000",

        # Vector index (temporary)
        VECTOR_INDEX_MODE="persistent",
        CHROMADB_PERSIST_DIRECTORY=temp_dir / "chroma",

        # RAG settings
        CHUNK_MIN_WORDS=500,
        CHUNK_MAX_WORDS=800,
        CHUNK_OVERLAP_WORDS=100,
        RAG_TOP_K=3,
    )


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings for operation handlers."""
    settings = MagicMock(spec=Settings)
    settings.VECTOR_INDEX_TIMEOUT_SECONDS = 5.0
    settings.VECTOR_UPSERT_BATCH_SIZE = 100
    return settings


@pytest.fixture
def mock_logger():
    """Create mock logger."""
    return MagicMock()


@pytest.fixture
def mock_embedding_response() -> Dict[str, Any]:
    """Mock embedding API response."""
    return {
        "object": "list",
        "data": [
            {
                "object": "embedding",
                "index": 0,
                "embedding": [0.1] * 8
            }
        ],
        "model": "text-embedding-3-small",
        "usage": {
            "prompt_tokens": 5,
            "total_tokens": 5
        }
    }


@pytest.fixture
def mock_chromadb_collection():
    """Create a mock ChromaDB collection for testing."""
    mock_collection = MagicMock()
    mock_collection.name = "persona_42"
    mock_collection.metadata = {"hnsw:space": "cosine", "dimension": 3}
    mock_collection.count.return_value = 2
    mock_collection.upsert.return_value = None
    mock_collection.query.return_value = {
        "ids": [["p1", "p2"]],
        "distances": [[0.1, 0.4]],
        "documents": [["Alpha chunk", "Beta chunk"]],
    }
    return mock_collection


@pytest.fixture
def mock_chromadb_client(mock_chromadb_collection):
    """Create a mock ChromaDB client with one existing collection."""
    mock_client = MagicMock()
    mock_client.get_or_create_collection.return_value = mock_chromadb_collection
    mock_client.get_collection.return_value = mock_chromadb_collection
    return mock_client


@pytest.fixture
def mock_embedding_manager():
    """Create mock embedding manager producing 3-dimensional vectors."""
    manager = AsyncMock()
    manager.embed_one.return_value = [0.1, 0.2, 0.3]
    manager.embed_batch.side_effect = lambda texts: [[0.1, 0.2, 0.3] for _ in texts]
    manager.dimension = 3
    return manager


@pytest.fixture
def mock_vector_index():
    """Create mock vector index."""
    index = AsyncMock()
    index.delete_collection.return_value = True
    index.search.return_value = []
    index.upsert.side_effect = lambda namespace, points: len(points)
    return index


@pytest.fixture
def mock_generation_manager():
    """Create mock generation manager."""
    manager = AsyncMock()
    manager.generate.return_value = "Generated answer"
    return manager


@pytest.fixture
def sample_chunks() -> List[RetrievedChunk]:
    """Retrieved chunks in descending score order."""
    return [
        RetrievedChunk(text="Alice founded the bakery in 1998.", score=0.91),
        RetrievedChunk(text="The bakery is open every day except Monday.", score=0.72),
    ]


# Environment cleanup
@pytest.fixture(autouse=True)
def cleanup_env():
    """Clean up environment variables before/after tests."""
    # Store original env vars
    original_env = dict(os.environ)

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
