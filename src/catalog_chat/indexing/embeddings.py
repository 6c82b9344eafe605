"""
Embeddings Module - Embedding providers for the vector store.
=============================================================

The vector store computes embeddings itself and hands ChromaDB plain vectors,
so the provider can be switched without touching indexing or querying code.

Providers:
- sbert: local sentence-transformers model, no API key (default)
- gemini: Google embedding API, requires GEMINI_API_KEY
"""

import time
from abc import ABC, abstractmethod
from typing import Optional

from tqdm import tqdm

from catalog_chat.shared.config import get_settings
from catalog_chat.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Abstract Base Class
# ─────────────────────────────────────────────────────────────────────────────


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implementations must provide embed_text() and embed_batch() plus the
    provider_name / model_name properties.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (sbert, gemini)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the embedding model."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Embed a single text string."""

    @abstractmethod
    def embed_batch(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        """Embed many texts, preserving order."""

    def embed_query(self, query: str) -> list[float]:
        """
        Embed a query text.

        Providers with separate query/document embeddings override this.
        """
        return self.embed_text(query)


# ─────────────────────────────────────────────────────────────────────────────
# SBERT Provider
# ─────────────────────────────────────────────────────────────────────────────


class SBERTEmbeddingProvider(EmbeddingProvider):
    """
    Local embeddings with sentence-transformers.

    The model is loaded on first use so that starting the CLI against an
    already indexed collection stays fast.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        batch_size: Optional[int] = None,
    ):
        sbert_config = get_settings().embeddings.sbert

        self._model_name = model_name or sbert_config.model_name
        self._device = device or sbert_config.device
        self._batch_size = batch_size or sbert_config.batch_size
        self._model = None

    @property
    def provider_name(self) -> str:
        return "sbert"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def model(self):
        """Lazy load and return the sentence transformer model."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                raise RuntimeError(
                    "sentence-transformers is required for SBERT embeddings. "
                    "Install with: pip install sentence-transformers"
                )

            device = self._device
            if device == "auto":
                import torch

                device = "cuda" if torch.cuda.is_available() else "cpu"

            logger.info(f"Loading SBERT model: {self._model_name} (device={device})")
            self._model = SentenceTransformer(self._model_name, device=device)
        return self._model

    def embed_text(self, text: str) -> list[float]:
        embedding = self.model.encode(text, convert_to_numpy=True, show_progress_bar=False)
        return embedding.tolist()

    def embed_batch(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        if not texts:
            return []

        embeddings = self.model.encode(
            texts,
            batch_size=self._batch_size,
            convert_to_numpy=True,
            show_progress_bar=show_progress,
        )
        return [emb.tolist() for emb in embeddings]


# ─────────────────────────────────────────────────────────────────────────────
# Gemini Provider
# ─────────────────────────────────────────────────────────────────────────────


class GeminiEmbeddingProvider(EmbeddingProvider):
    """
    Embeddings from the Google GenAI API.

    Documents are embedded with the RETRIEVAL_DOCUMENT task type and questions
    with RETRIEVAL_QUERY.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        batch_size: Optional[int] = None,
    ):
        settings = get_settings()
        gemini_config = settings.embeddings.gemini

        self._model_name = model_name or gemini_config.model_name
        self._api_key = api_key or settings.gemini_api_key
        self._batch_size = batch_size or gemini_config.batch_size
        self._client = None

        if not self._api_key:
            raise ValueError(
                "Gemini API key is required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def client(self):
        """Lazy load and return the Gemini client."""
        if self._client is None:
            try:
                from google import genai
            except ImportError:
                raise RuntimeError(
                    "google-genai is required for Gemini embeddings. "
                    "Install with: pip install google-genai"
                )
            self._client = genai.Client(api_key=self._api_key)
            logger.info(f"Gemini embedding client initialized for model: {self._model_name}")
        return self._client

    def _embed(self, contents, task_type: str) -> list[list[float]]:
        try:
            result = self.client.models.embed_content(
                model=self._model_name,
                contents=contents,
                config={"task_type": task_type},
            )
        except Exception as e:
            raise RuntimeError(f"Gemini embedding failed: {e}") from e
        return [list(embedding.values) for embedding in result.embeddings]

    def embed_text(self, text: str) -> list[float]:
        return self._embed(text, "RETRIEVAL_DOCUMENT")[0]

    def embed_query(self, query: str) -> list[float]:
        return self._embed(query, "RETRIEVAL_QUERY")[0]

    def embed_batch(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        if not texts:
            return []

        embeddings: list[list[float]] = []
        starts = range(0, len(texts), self._batch_size)
        if show_progress:
            starts = tqdm(starts, desc="Embedding (Gemini)")

        for i in starts:
            embeddings.extend(self._embed(texts[i : i + self._batch_size], "RETRIEVAL_DOCUMENT"))
            # Stay under the per-minute request quota
            if i + self._batch_size < len(texts):
                time.sleep(0.1)

        return embeddings


# ─────────────────────────────────────────────────────────────────────────────
# Provider Factory
# ─────────────────────────────────────────────────────────────────────────────


_provider_cache: dict[str, EmbeddingProvider] = {}


def get_embedding_provider(provider_name: Optional[str] = None) -> EmbeddingProvider:
    """
    Get a (cached) embedding provider instance.

    Args:
        provider_name: "sbert" or "gemini"; the configured provider if None

    Raises:
        ValueError: If the provider name is unknown
    """
    if provider_name is None:
        provider_name = get_settings().get_effective_embedding_provider()

    provider_name = provider_name.lower().strip()

    if provider_name in _provider_cache:
        return _provider_cache[provider_name]

    provider: EmbeddingProvider
    if provider_name == "sbert":
        provider = SBERTEmbeddingProvider()
    elif provider_name == "gemini":
        provider = GeminiEmbeddingProvider()
    else:
        raise ValueError(
            f"Unknown embedding provider: {provider_name}. Valid options: sbert, gemini"
        )

    _provider_cache[provider_name] = provider
    logger.info(f"Initialized embedding provider: {provider.provider_name} ({provider.model_name})")
    return provider


def clear_provider_cache() -> None:
    """Clear the provider cache."""
    _provider_cache.clear()
