"""
catalog-chat - Conversational front-end for a university class schedule
=======================================================================

Loads the class schedule CSV, indexes it in ChromaDB and answers questions:

- Questions naming an instructor are answered directly from the schedule,
  after rewriting nicknames ("Phil Peterson") to canonical names.
- Other questions run a semantic search over the indexed courses and the
  matches are handed to an LLM together with the question.
"""

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__license__",
    "shared",
    "catalog",
    "indexing",
    "rag",
    "app",
    "cli",
]
