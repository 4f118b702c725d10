"""
Persona RAG - knowledge-grounded answers for chat personas.

This package provides the document-to-retrieval pipeline behind a persona:
- Sentence-aligned, overlapping chunking of free-text knowledge bases
- Embedding through pluggable providers (API or local)
- Per-persona ChromaDB collections for similarity search
- Grounded prompt assembly and answer generation
"""

__version__ = "0.1.0"
__author__ = "Persona RAG Team"

from .config.settings import Settings
from .rag.pipeline import RAGPipeline
from .core.server import PersonaRagServer

__all__ = ["PersonaRagServer", "RAGPipeline", "Settings"]
