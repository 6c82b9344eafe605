"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Sample course data and CSV files
- Alias registry and metadata index
- Stand-ins for the vector store, chat client, embeddings and ChromaDB
"""

import os
import tempfile
from pathlib import Path
from typing import Generator, Optional

import pytest

# Keep the developer's shell environment out of the settings under test
for _var in (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "CATALOG_CSV",
    "CHROMA_HOST",
    "CHROMA_PORT",
    "EMBEDDING_PROVIDER",
    "GEMINI_MODEL",
    "TOP_K",
    "LOG_LEVEL",
):
    os.environ.pop(_var, None)


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


# ─────────────────────────────────────────────────────────────────────────────
# Sample Data Fixtures
# ─────────────────────────────────────────────────────────────────────────────


CSV_HEADER = (
    "Subject,Course Number,Section,CRN,Schedule Type Code,Campus Code,Title Short Desc,"
    "Instruction Mode Desc,Meeting Type Codes,Meet Days,Begin Time,End Time,Meet Start,"
    "Meet End,Building,Room,Actual Enrollment,Primary Instructor First Name,"
    "Primary Instructor Last Name,Primary Instructor Email,College"
)


@pytest.fixture
def sample_course_rows() -> list[dict]:
    """Raw course field values."""
    return [
        {
            "subject": "AAS", "course_number": "100", "section": "01", "crn": "42180",
            "schedule_type_code": "SEM", "campus_code": "M",
            "title": "Black Activists & Visionaries", "instruction_mode_desc": "In-Person",
            "meeting_type_codes": "IP", "meet_days": "MW", "begin_time": "1645",
            "end_time": "1825", "meet_start": "8/20/24", "meet_end": "12/4/24",
            "building": "LM", "room": "140", "actual_enrollment": "30",
            "instructor_first_name": "Sheryl", "instructor_last_name": "Davis",
            "instructor_email": "sedavis2@usfca.edu", "college": "LA",
        },
        {
            "subject": "BAT", "course_number": "101", "section": "01", "crn": "99999",
            "schedule_type_code": "LEC", "campus_code": "G",
            "title": "The Dark Knight's Tactics", "instruction_mode_desc": "In-Person",
            "meeting_type_codes": "LEC", "meet_days": "TR", "begin_time": "1800",
            "end_time": "2000", "meet_start": "8/20/24", "meet_end": "12/4/24",
            "building": "Wayne Tower", "room": "Gotham", "actual_enrollment": "20",
            "instructor_first_name": "Bruce", "instructor_last_name": "Wayne",
            "instructor_email": "bwayne@gotham.edu", "college": "Justice",
        },
        {
            "subject": "PHIL", "course_number": "110", "section": "03", "crn": "41876",
            "schedule_type_code": "LEC", "campus_code": "M",
            "title": "Great Philosophical Questions", "instruction_mode_desc": "In-Person",
            "meeting_type_codes": "IP", "meet_days": "MWF", "begin_time": "1045",
            "end_time": "1150", "meet_start": "8/20/24", "meet_end": "12/4/24",
            "building": "KA", "room": "263", "actual_enrollment": "35",
            "instructor_first_name": "Philip", "instructor_last_name": "Peterson",
            "instructor_email": "ppeterson@usfca.edu", "college": "AS",
        },
        {
            "subject": "BIOL", "course_number": "385", "section": "01", "crn": "41234",
            "schedule_type_code": "LEC", "campus_code": "M",
            "title": "Bioinformatics", "instruction_mode_desc": "In-Person",
            "meeting_type_codes": "IP", "meet_days": "TR", "begin_time": "0955",
            "end_time": "1140", "meet_start": "8/20/24", "meet_end": "12/4/24",
            "building": "KA", "room": "311", "actual_enrollment": "24",
            "instructor_first_name": "Dana", "instructor_last_name": "Whitfield",
            "instructor_email": "dwhitfield@usfca.edu", "college": "AS",
        },
        {
            "subject": "RHET", "course_number": "110", "section": "07", "crn": "42011",
            "schedule_type_code": "LEC", "campus_code": "M",
            "title": "Written Communication I", "instruction_mode_desc": "In-Person",
            "meeting_type_codes": "IP", "meet_days": "TR", "begin_time": "1445",
            "end_time": "1630", "meet_start": "8/20/24", "meet_end": "12/4/24",
            "building": "MH", "room": "227", "actual_enrollment": "19",
            "instructor_first_name": "Phil", "instructor_last_name": "Choong",
            "instructor_email": "pchoong@usfca.edu", "college": "AS",
        },
    ]


@pytest.fixture
def sample_courses(sample_course_rows):
    """Course instances for the sample rows."""
    from catalog_chat.shared.schemas import Course

    return [Course(**row) for row in sample_course_rows]


@pytest.fixture
def sample_csv(temp_dir: Path, sample_course_rows) -> Path:
    """Schedule CSV containing the sample rows."""
    from catalog_chat.shared.schemas import COURSE_FIELDS

    lines = [CSV_HEADER]
    for row in sample_course_rows:
        values = []
        for field in COURSE_FIELDS:
            value = row[field]
            values.append(f'"{value}"' if "," in value else value)
        lines.append(",".join(values))

    path = temp_dir / "schedule.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def registry():
    """Alias registry with the built-in instructors plus a test one."""
    from catalog_chat.catalog.aliases import DEFAULT_INSTRUCTORS, AliasRegistry
    from catalog_chat.shared.schemas import Instructor

    return AliasRegistry(
        [
            *DEFAULT_INSTRUCTORS,
            Instructor(canonical_name="Bruce Wayne", aliases=frozenset({"Batman", "B. Wayne"})),
        ]
    )


@pytest.fixture
def metadata_index(sample_courses, registry):
    """Metadata index over the sample courses."""
    from catalog_chat.catalog.metadata import MetadataIndex

    return MetadataIndex(sample_courses, header=CSV_HEADER, registry=registry)


# ─────────────────────────────────────────────────────────────────────────────
# Stand-ins for External Services
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def stub_search():
    """VectorSearch that returns canned documents and records queries."""
    from catalog_chat.indexing.vector_store import VectorSearch

    class StubSearch(VectorSearch):
        def __init__(self):
            self.documents: list[list[str]] = []
            self.queries: list[str] = []
            self.added: list = []
            self.error: Optional[Exception] = None

        def query_similar(self, text, top_k=None):
            self.queries.append(text)
            if self.error is not None:
                raise self.error
            return self.documents

        def add_courses(self, courses):
            if self.added:
                return 0
            self.added = list(courses)
            return len(self.added)

    return StubSearch()


@pytest.fixture
def stub_llm():
    """ChatCompletionClient that records the prompts it receives."""
    from catalog_chat.rag.llm import ChatCompletionClient

    class StubLLM(ChatCompletionClient):
        def __init__(self):
            self.calls: list[tuple[str, str]] = []
            self.reply = "stub answer"
            self.error: Optional[Exception] = None

        def complete(self, question, system_prompt):
            self.calls.append((question, system_prompt))
            if self.error is not None:
                raise self.error
            return self.reply

        @property
        def last_system_prompt(self) -> str:
            return self.calls[-1][1]

    return StubLLM()


@pytest.fixture
def fake_embeddings():
    """Deterministic embedding provider."""
    from catalog_chat.indexing.embeddings import EmbeddingProvider

    class FakeEmbeddingProvider(EmbeddingProvider):
        dims = 8

        @property
        def provider_name(self) -> str:
            return "fake"

        @property
        def model_name(self) -> str:
            return "fake-model"

        def embed_text(self, text):
            vector = [0.0] * self.dims
            for i, ch in enumerate(text):
                vector[i % self.dims] += ord(ch) / 1000.0
            return vector

        def embed_batch(self, texts, show_progress=False):
            return [self.embed_text(t) for t in texts]

    return FakeEmbeddingProvider()


@pytest.fixture
def fake_chroma_client():
    """In-memory stand-in for a ChromaDB client."""

    class FakeCollection:
        def __init__(self, name):
            self.name = name
            self.ids: list[str] = []
            self.documents: list[str] = []
            self.metadatas: list[dict] = []
            self.add_calls = 0

        def count(self):
            return len(self.ids)

        def add(self, ids, embeddings, documents, metadatas):
            if len(set(ids)) != len(ids) or set(ids) & set(self.ids):
                raise ValueError("duplicate ids")
            self.add_calls += 1
            self.ids.extend(ids)
            self.documents.extend(documents)
            self.metadatas.extend(metadatas)

        def query(self, query_embeddings, n_results, include):
            return {"documents": [self.documents[:n_results]]}

    class FakeClient:
        def __init__(self):
            self.collections: dict[str, FakeCollection] = {}

        def get_or_create_collection(self, name, metadata=None):
            return self.collections.setdefault(name, FakeCollection(name))

        def delete_collection(self, name):
            self.collections.pop(name, None)

    return FakeClient()


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "requires_api: marks tests that require API keys"
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and providers between tests."""
    from catalog_chat.indexing.embeddings import clear_provider_cache
    from catalog_chat.shared.config import get_settings

    get_settings.cache_clear()
    clear_provider_cache()

    yield

    get_settings.cache_clear()
    clear_provider_cache()
