"""
Router Module - Decide how each question is answered.
=====================================================

Routing policy, in order:

1. Rewrite instructor aliases to canonical names.
2. If the question names an instructor, answer from the in-memory course
   list (direct lookup). The vector store is not consulted.
3. Otherwise run a semantic query. With matches, the LLM answers from a
   system prompt listing them; without matches, the LLM answers under the
   generic prompt (or the intent-specific prompt when enabled).

Flow:
    Question → Alias substitution → Instructor? → Direct lookup
                                              ↘ Vector query → LLM
"""

from typing import Optional

from catalog_chat.catalog.aliases import AliasRegistry
from catalog_chat.catalog.formatting import format_compact, format_full, pretty_print_documents
from catalog_chat.catalog.metadata import MetadataIndex
from catalog_chat.indexing.vector_store import VectorSearch
from catalog_chat.rag.llm import ChatCompletionClient
from catalog_chat.rag.prompts import (
    GENERIC_SYSTEM_PROMPT,
    build_matches_prompt,
    generate_system_message,
)
from catalog_chat.shared.exceptions import (
    ExternalServiceError,
    LLMError,
    NoCourseDataError,
    VectorStoreError,
)
from catalog_chat.shared.logging import get_logger

logger = get_logger(__name__)

EMPTY_QUESTION_REPLY = "Please enter a valid query."


class Router:
    """
    Answers catalog questions.

    Constructed once at startup with its collaborators and passed to whatever
    handles requests; it holds no per-question state.

    Example:
        >>> router = Router(index, store, llm)
        >>> print(router.answer("What courses is Phil Peterson teaching?"))
        Here are the courses taught by Philip Peterson:
        Subject:                 PHIL
        ...
    """

    def __init__(
        self,
        index: Optional[MetadataIndex],
        search: VectorSearch,
        llm: ChatCompletionClient,
        registry: Optional[AliasRegistry] = None,
        top_k: Optional[int] = None,
        use_intent_prompts: bool = False,
    ):
        self.index = index
        self.search = search
        self.llm = llm
        self.top_k = top_k
        self.use_intent_prompts = use_intent_prompts

        if registry is not None:
            self.registry = registry
        elif index is not None:
            self.registry = index.registry
        else:
            self.registry = AliasRegistry()

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    def answer(self, question: str) -> str:
        """
        Answer a question.

        Raises:
            NoCourseDataError: An instructor was named but no courses are loaded
            VectorStoreError: The semantic query failed
            LLMError: The chat completion failed
        """
        if not question or not question.strip():
            return EMPTY_QUESTION_REPLY

        logger.info(f"Processing question: {question}")
        question = self.registry.substitute_aliases(question)

        instructor = self.detect_instructor(question)
        if instructor:
            logger.info(f"Direct lookup for instructor: {instructor}")
            return self.lookup_instructor(instructor)

        return self._answer_from_search(question)

    def courses_for(self, term: str) -> str:
        """
        Compact listing of the courses taught by the instructor named ``term``.

        ``term`` must be a name (or alias) on its own, not a sentence.
        """
        name = self.registry.canonicalize(term)
        if not name:
            return f"No valid instructor found for '{term}'."

        courses = self._courses_taught_by(name)
        if not courses:
            return f"No courses found for {name}."
        return f"Here are the courses taught by {name}:\n{format_compact(courses)}"

    def detect_instructor(self, question: str) -> Optional[str]:
        """Canonical name of the instructor mentioned in the question, if any."""
        found = self.registry.find_instructor(question)
        if found is None and self.index is not None:
            found = self.index.find_instructor_in(question)
        return found

    def lookup_instructor(self, name: str) -> str:
        """Full listing of the courses taught by ``name``."""
        courses = self._courses_taught_by(name)
        if not courses:
            return f"No courses found for {name}."
        return f"Here are the courses taught by {name}:\n{format_full(courses)}"

    def fallback_prompt(self, question: str) -> str:
        """System prompt used when the vector store returns nothing."""
        if not self.use_intent_prompts:
            return GENERIC_SYSTEM_PROMPT
        instructors = self.index.instructors if self.index is not None else ()
        departments = self.index.departments if self.index is not None else ()
        return generate_system_message(question, instructors, departments)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _courses_taught_by(self, name: str):
        if self.index is None or self.index.is_empty():
            raise NoCourseDataError(f"no course data available to look up {name}")
        return self.index.courses_taught_by(name)

    def _answer_from_search(self, question: str) -> str:
        try:
            documents = self.search.query_similar(question, self.top_k)
        except ExternalServiceError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Vector query failed: {e}") from e

        if documents:
            logger.info(f"Vector store returned {len(documents)} matches")
            logger.debug(f"Matches:\n{pretty_print_documents(documents)}")
            system_prompt = build_matches_prompt(documents)
        else:
            logger.info("No vector store matches, using fallback prompt")
            system_prompt = self.fallback_prompt(question)

        try:
            return self.llm.complete(question, system_prompt)
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"ChatCompletion failed: {e}") from e
