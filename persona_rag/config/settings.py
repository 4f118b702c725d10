"""Configuration settings for Persona RAG."""

from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    SERVER_HOST: str = Field(default="localhost", description="Server host")
    SERVER_PORT: int = Field(default=8000, description="Server port")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIR: Path = Field(default=Path("./logs"), description="Log file directory")

    # Embedding Configuration
    EMBEDDING_PROVIDER: Literal["api", "local"] = Field(
        default="api", description="Embedding provider: 'api' or 'local'"
    )
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="Embedding model name"
    )
    EMBEDDING_API_BASE: Optional[str] = Field(
        default=None, description="Embedding API base URL (e.g., http://localhost:4000)"
    )
    EMBEDDING_API_KEY: Optional[str] = Field(
        default=None, description="Embedding API key"
    )
    EMBEDDING_DIMENSIONS: Optional[int] = Field(
        default=None, ge=1, description="Embedding dimensionality; probed from the provider when unset"
    )
    EMBEDDING_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, description="Timeout for a single embedding request"
    )
    EMBEDDING_MAX_CONCURRENCY: int = Field(
        default=1, ge=1, description="Maximum embedding requests in flight during ingestion"
    )
    EMBEDDING_MAX_RETRIES: int = Field(
        default=3, ge=0, description="Retries for transient embedding failures"
    )
    EMBEDDING_RETRY_BASE_DELAY: float = Field(
        default=1.0, ge=0, description="Initial backoff delay in seconds"
    )

    # Generation Configuration
    GENERATION_PROVIDER: Literal["api", "echo"] = Field(
        default="api", description="Generation provider: 'api' or 'echo' (offline development)"
    )
    GENERATION_MODEL: str = Field(
        default="gpt-4o-mini", description="Chat completion model name"
    )
    GENERATION_API_BASE: Optional[str] = Field(
        default=None, description="Chat completion API base URL"
    )
    GENERATION_API_KEY: Optional[str] = Field(
        default=None, description="Chat completion API key"
    )
    GENERATION_TEMPERATURE: float = Field(
        default=0.2, ge=0.0, le=2.0, description="Sampling temperature"
    )
    GENERATION_TIMEOUT_SECONDS: float = Field(
        default=60.0, gt=0, description="Timeout for a single generation request"
    )

    # Vector Index Configuration
    VECTOR_INDEX_MODE: Literal["persistent", "http"] = Field(
        default="persistent", description="ChromaDB client mode: 'persistent' or 'http'"
    )
    CHROMADB_PERSIST_DIRECTORY: Path = Field(
        default=Path("./data/chroma"), description="ChromaDB persistence directory"
    )
    CHROMADB_HOST: str = Field(default="localhost", description="ChromaDB server host")
    CHROMADB_PORT: int = Field(default=8001, description="ChromaDB server port")
    CHROMADB_SSL: bool = Field(default=False, description="Use HTTPS for the ChromaDB server")
    VECTOR_INDEX_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, description="Timeout for a single vector index call"
    )
    VECTOR_UPSERT_BATCH_SIZE: int = Field(
        default=100, ge=1, description="Points written per upsert request"
    )
    NAMESPACE_PREFIX: str = Field(
        default="persona_", description="Prefix of per-persona collection names"
    )

    # RAG Configuration
    CHUNK_MIN_WORDS: int = Field(default=500, ge=0, description="Minimum words per chunk")
    CHUNK_MAX_WORDS: int = Field(default=800, ge=1, description="Maximum words per chunk")
    CHUNK_OVERLAP_WORDS: int = Field(
        default=100, ge=0, description="Words shared by consecutive chunks"
    )
    RAG_TOP_K: int = Field(default=3, ge=1, description="Chunks retrieved per question")
    DEFAULT_PERSONALITY: str = Field(
        default="Helpful and professional.",
        description="Personality used when a persona has none",
    )

    def create_directories(self) -> None:
        """Create necessary directories."""
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)
        if self.VECTOR_INDEX_MODE == "persistent":
            self.CHROMADB_PERSIST_DIRECTORY.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump()

    def __repr__(self) -> str:
        """String representation of settings."""
        return (
            f"Settings(host={self.SERVER_HOST}, port={self.SERVER_PORT}, "
            f"embedding={self.EMBEDDING_PROVIDER}:{self.EMBEDDING_MODEL}, "
            f"index={self.VECTOR_INDEX_MODE})"
        )
