"""
App Module - Build the assistant from settings.
===============================================

build_router() wires the metadata index, vector store and chat client into a
Router and makes sure the courses are indexed. Each collaborator can be passed
in explicitly, which is how tests and alternative front-ends substitute their
own.
"""

from typing import Optional

from catalog_chat.catalog.aliases import AliasRegistry
from catalog_chat.catalog.metadata import MetadataIndex
from catalog_chat.indexing.vector_store import ChromaCourseStore, VectorSearch
from catalog_chat.rag.llm import ChatCompletionClient, GeminiChatClient
from catalog_chat.rag.router import Router
from catalog_chat.shared.config import Settings, get_settings
from catalog_chat.shared.logging import get_logger

logger = get_logger(__name__)


def build_registry(settings: Optional[Settings] = None) -> AliasRegistry:
    """Alias registry from the configured instructors (built-in list if none)."""
    settings = settings or get_settings()
    return AliasRegistry.from_config(settings.instructors)


def load_index(
    settings: Optional[Settings] = None,
    registry: Optional[AliasRegistry] = None,
) -> MetadataIndex:
    """
    Load the configured schedule CSV.

    Raises:
        ConfigurationError: If the CSV cannot be read
    """
    settings = settings or get_settings()
    registry = registry or build_registry(settings)
    csv_path = settings.get_effective_csv_path()
    logger.info(f"Loading course data from {csv_path}")
    return MetadataIndex.from_csv(csv_path, registry=registry, encoding=settings.catalog.encoding)


def build_router(
    settings: Optional[Settings] = None,
    index: Optional[MetadataIndex] = None,
    search: Optional[VectorSearch] = None,
    llm: Optional[ChatCompletionClient] = None,
    index_courses: bool = True,
) -> Router:
    """
    Construct the Router used for the whole session.

    The chat client is created first so a missing API key fails before any
    data is loaded.

    Raises:
        ConfigurationError: Missing credential or unreadable course data
        VectorStoreError: ChromaDB is unreachable or rejects the courses
    """
    settings = settings or get_settings()
    registry = index.registry if index is not None else build_registry(settings)

    if llm is None:
        llm = GeminiChatClient(registry=registry)
    if index is None:
        index = load_index(settings, registry)
    if search is None:
        search = ChromaCourseStore(registry=registry)

    if index_courses:
        added = search.add_courses(index.courses)
        if added:
            logger.info(f"Indexed {added} courses")

    return Router(
        index=index,
        search=search,
        llm=llm,
        registry=registry,
        top_k=settings.get_effective_top_k(),
        use_intent_prompts=settings.routing.use_intent_prompts,
    )
