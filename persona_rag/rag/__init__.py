"""Retrieval-augmented generation for persona knowledge bases."""

from .chunking import Chunker, chunk_text
from .embeddings import EmbeddingManager
from .generation import GenerationManager
from .index import VectorIndex
from .pipeline import RAGPipeline
from .prompts import INSUFFICIENT_KNOWLEDGE_REPLY, build_prompt

__all__ = [
    "Chunker",
    "chunk_text",
    "EmbeddingManager",
    "GenerationManager",
    "VectorIndex",
    "RAGPipeline",
    "INSUFFICIENT_KNOWLEDGE_REPLY",
    "build_prompt",
]
