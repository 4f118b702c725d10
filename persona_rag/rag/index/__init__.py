"""
Vector index implementation using ChromaDB, one collection per persona.

This package provides:

- **Core Management**: VectorIndex with client lifecycle and coordination
- **Collection Operations**: idempotent create, tolerant delete, statistics
- **Point Operations**: batched upserts with dimension checks
- **Search Operations**: top-K cosine similarity search

Collections are created with cosine distance and record their declared
vector dimension in collection metadata. Every call into the blocking
ChromaDB client runs in a worker thread under VECTOR_INDEX_TIMEOUT_SECONDS,
and every failure surfaces as VectorIndexError, except searching or deleting
a collection that does not exist, which are not failures.
"""

from .core import VectorIndex

__all__ = ["VectorIndex"]
