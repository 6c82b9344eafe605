"""
Vector Store Module - ChromaDB bridge for indexing and semantic search.
=======================================================================

Provides:
- VectorSearch: the narrow interface the question router depends on
- ChromaCourseStore: ChromaDB implementation with a course collection and an
  instructor collection

Indexing is idempotent: when a collection already holds documents the courses
are not added again, so restarting the assistant does not duplicate entries.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Sequence
from typing import Any, Optional

import chromadb
from chromadb.config import Settings as ChromaSettings
from tenacity import Retrying, stop_after_attempt, wait_exponential

from catalog_chat.catalog.aliases import AliasRegistry, get_default_registry
from catalog_chat.catalog.formatting import format_compact_line, format_document
from catalog_chat.indexing.embeddings import EmbeddingProvider, get_embedding_provider
from catalog_chat.shared.config import get_settings
from catalog_chat.shared.exceptions import VectorStoreError
from catalog_chat.shared.logging import get_logger
from catalog_chat.shared.schemas import Course

logger = get_logger(__name__)

BATCH_SIZE = 500


# ─────────────────────────────────────────────────────────────────────────────
# Interface
# ─────────────────────────────────────────────────────────────────────────────


class VectorSearch(ABC):
    """Similarity search over indexed course documents."""

    @abstractmethod
    def query_similar(self, text: str, top_k: Optional[int] = None) -> list[list[str]]:
        """
        Find documents similar to ``text``.

        Returns:
            One list of text fields per matched document, best match first
        """

    @abstractmethod
    def add_courses(self, courses: Sequence[Course]) -> int:
        """
        Index courses unless the store already holds documents.

        Returns:
            Number of course documents added (0 when skipped)
        """


# ─────────────────────────────────────────────────────────────────────────────
# ChromaDB Implementation
# ─────────────────────────────────────────────────────────────────────────────


def create_chroma_client() -> Any:
    """Create the ChromaDB client described by the settings."""
    settings = get_settings()
    config = settings.vector_store
    chroma_settings = ChromaSettings(anonymized_telemetry=False)

    try:
        if config.mode == "persistent":
            persist_dir = settings.resolve_path(config.persist_dir)
            persist_dir.mkdir(parents=True, exist_ok=True)
            return chromadb.PersistentClient(path=str(persist_dir), settings=chroma_settings)

        return chromadb.HttpClient(
            host=settings.get_effective_chroma_host(),
            port=settings.get_effective_chroma_port(),
            settings=chroma_settings,
        )
    except Exception as e:
        raise VectorStoreError(f"Failed to connect to ChromaDB: {e}") from e


def course_document_id(course: Course, position: int) -> str:
    """Stable document id for a course, falling back to its row position."""
    if course.crn:
        return f"crn-{course.crn}"
    return f"row-{position}"


def build_instructor_documents(
    courses: Sequence[Course],
    registry: AliasRegistry,
) -> dict[str, str]:
    """One text document per canonical instructor listing what they teach."""
    grouped: dict[str, list[Course]] = defaultdict(list)
    for course in courses:
        name = registry.canonicalize(course.instructor_name)
        if name:
            grouped[name].append(course)

    documents = {}
    for name, taught in grouped.items():
        emails = sorted({c.instructor_email for c in taught if c.instructor_email})
        lines = "; ".join(
            f"{c.subject} {c.course_number} {format_compact_line(c)}" for c in taught
        )
        documents[name] = (
            f"Instructor: {name}. Email: {', '.join(emails)}. Courses: {lines}"
        )
    return documents


class ChromaCourseStore(VectorSearch):
    """
    ChromaDB-backed course and instructor search.

    Questions that mention "instructor" are answered from the instructor
    collection; everything else is searched in the course collection.

    Example:
        >>> store = ChromaCourseStore()
        >>> store.add_courses(index.courses)
        >>> store.query_similar("intro to bioinformatics", top_k=3)
        [['Subject: BIOL. Course Number: 340. ...'], ...]
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        course_collection: Optional[str] = None,
        instructor_collection: Optional[str] = None,
        top_k: Optional[int] = None,
        max_attempts: Optional[int] = None,
        registry: Optional[AliasRegistry] = None,
    ):
        settings = get_settings()
        config = settings.vector_store

        self._client = client if client is not None else create_chroma_client()
        self._embedding_provider = embedding_provider or get_embedding_provider()
        self._registry = registry if registry is not None else get_default_registry()
        self._top_k = top_k or settings.get_effective_top_k()
        self._max_attempts = max_attempts or config.max_attempts

        self.course_collection_name = course_collection or config.course_collection
        self.instructor_collection_name = instructor_collection or config.instructor_collection

        try:
            self._courses = self._client.get_or_create_collection(
                name=self.course_collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            self._instructors = self._client.get_or_create_collection(
                name=self.instructor_collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as e:
            raise VectorStoreError(f"Failed to open ChromaDB collections: {e}") from e

        logger.info(
            f"Vector store ready: courses={self.course_collection_name}, "
            f"instructors={self.instructor_collection_name}"
        )

    def _call(self, fn, *args, **kwargs):
        """Run a ChromaDB call, retrying transient failures."""
        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)

    def _collection_for(self, text: str):
        if "instructor" in text.lower():
            return self._instructors
        return self._courses

    def query_similar(self, text: str, top_k: Optional[int] = None) -> list[list[str]]:
        if not text or not text.strip():
            return []

        collection = self._collection_for(text)
        k = top_k or self._top_k
        logger.info(f"Querying '{collection.name}' for: {text[:60]}")

        try:
            if self._call(collection.count) == 0:
                return []
            embedding = self._embedding_provider.embed_query(text)
            results = self._call(
                collection.query,
                query_embeddings=[embedding],
                n_results=k,
                include=["documents"],
            )
        except Exception as e:
            raise VectorStoreError(f"Vector store query failed: {e}") from e

        documents = (results.get("documents") or [[]])[0] or []
        return [[doc] for doc in documents if doc]

    def add_courses(self, courses: Sequence[Course]) -> int:
        if not courses:
            return 0

        try:
            added = self._add_course_documents(courses)
            self._add_instructor_documents(courses)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Failed to add courses to vector store: {e}") from e
        return added

    def _add_course_documents(self, courses: Sequence[Course]) -> int:
        existing = self._call(self._courses.count)
        if existing > 0:
            logger.info(
                f"Courses already loaded in '{self.course_collection_name}' "
                f"({existing} documents), skipping addition"
            )
            return 0

        ids: list[str] = []
        seen: set[str] = set()
        for position, course in enumerate(courses):
            doc_id = course_document_id(course, position)
            if doc_id in seen:
                doc_id = f"{doc_id}-{position}"
            seen.add(doc_id)
            ids.append(doc_id)

        texts = [format_document(course) for course in courses]
        metadatas = [
            {
                "instructor_canonical_name": self._registry.canonicalize(course.instructor_name),
                "subject": course.subject,
                "crn": course.crn,
                "title": course.title,
            }
            for course in courses
        ]

        logger.info(f"Generating embeddings for {len(texts)} courses...")
        embeddings = self._embedding_provider.embed_batch(texts, show_progress=True)

        added = 0
        for i in range(0, len(texts), BATCH_SIZE):
            end = min(i + BATCH_SIZE, len(texts))
            self._call(
                self._courses.add,
                ids=ids[i:end],
                embeddings=embeddings[i:end],
                documents=texts[i:end],
                metadatas=metadatas[i:end],
            )
            added += end - i
            logger.debug(f"Added batch {i // BATCH_SIZE + 1}: {added}/{len(texts)} courses")

        logger.info(f"Added {added} courses to '{self.course_collection_name}'")
        return added

    def _add_instructor_documents(self, courses: Sequence[Course]) -> int:
        if self._call(self._instructors.count) > 0:
            logger.info(f"Instructors already loaded in '{self.instructor_collection_name}'")
            return 0

        documents = build_instructor_documents(courses, self._registry)
        if not documents:
            return 0

        names = list(documents)
        texts = [documents[name] for name in names]
        embeddings = self._embedding_provider.embed_batch(texts)
        self._call(
            self._instructors.add,
            ids=[f"instructor-{i}" for i in range(len(names))],
            embeddings=embeddings,
            documents=texts,
            metadatas=[{"instructor_canonical_name": name} for name in names],
        )
        logger.info(f"Added {len(names)} instructors to '{self.instructor_collection_name}'")
        return len(names)

    def count(self) -> int:
        """Number of course documents in the course collection."""
        try:
            return self._call(self._courses.count)
        except Exception as e:
            raise VectorStoreError(f"Failed to count course documents: {e}") from e

    def clear(self) -> None:
        """Drop and recreate both collections."""
        try:
            for name in (self.course_collection_name, self.instructor_collection_name):
                self._call(self._client.delete_collection, name)
            self._courses = self._call(
                self._client.get_or_create_collection,
                name=self.course_collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            self._instructors = self._call(
                self._client.get_or_create_collection,
                name=self.instructor_collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as e:
            raise VectorStoreError(f"Failed to clear vector store collections: {e}") from e
        logger.info("Cleared course and instructor collections")
