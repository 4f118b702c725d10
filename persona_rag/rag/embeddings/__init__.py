"""
Embedding generation for knowledge chunks and user questions.

This package provides a flexible embedding system with multiple provider backends:

- **API Provider**: Uses external OpenAI-compatible endpoints for embeddings
- **Local Provider**: Uses sentence-transformers for local embedding generation

Architecture:
- EmbeddingProvider: Abstract base class for all embedding providers
- ApiEmbeddingProvider: API-based provider with per-request retry and timeout
- LocalEmbeddingProvider: Local sentence-transformers provider
- EmbeddingManager: Selects the provider and runs batch embedding through a
  bounded-concurrency pool (one request in flight by default)

Every failure surfaces as EmbeddingServiceError; a missing vector is never
replaced by a default.
"""

from .manager import EmbeddingManager

__all__ = ["EmbeddingManager"]
