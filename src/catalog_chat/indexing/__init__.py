"""
Indexing Module - Embeddings and the ChromaDB bridge.
=====================================================

- embeddings: SBERT (local) and Gemini embedding providers
- vector_store: VectorSearch interface and its ChromaDB implementation
"""

from catalog_chat.indexing.embeddings import (
    EmbeddingProvider,
    GeminiEmbeddingProvider,
    SBERTEmbeddingProvider,
    get_embedding_provider,
)
from catalog_chat.indexing.vector_store import ChromaCourseStore, VectorSearch

__all__ = [
    "EmbeddingProvider",
    "GeminiEmbeddingProvider",
    "SBERTEmbeddingProvider",
    "get_embedding_provider",
    "ChromaCourseStore",
    "VectorSearch",
]
