"""
Tests for RAG Module.
=====================

Tests for:
- Prompts: matches prompt and intent classification
- Router: direct lookup, vector search fallback, error propagation
- GeminiChatClient: request shaping and error handling (mocked)
"""

import pytest
from unittest.mock import MagicMock, patch


# ─────────────────────────────────────────────────────────────────────────────
# Prompt Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPrompts:
    """Tests for system prompts and the intent classifier."""

    def test_build_matches_prompt(self):
        """Each document becomes one bullet between the preamble and closing."""
        from catalog_chat.rag.prompts import build_matches_prompt

        prompt = build_matches_prompt([["Title: Guitar", "Room: 102"], ["Title: Bass"]])

        assert prompt == (
            "Based on the available information, here are the relevant matches:\n\n"
            "- Title: Guitar Room: 102\n"
            "- Title: Bass\n"
            "\nPlease use this information to answer the user's question."
        )

    def test_classify_instructor(self):
        """A known instructor name wins over everything else."""
        from catalog_chat.rag.prompts import classify_intent
        from catalog_chat.shared.schemas import Intent

        intent = classify_intent(
            "Where does philip peterson teach PHIL?",
            instructors=["Philip Peterson"],
            departments=["PHIL"],
        )

        assert intent == Intent.INSTRUCTOR_LOOKUP

    def test_classify_department(self):
        """Department codes match as whole words only."""
        from catalog_chat.rag.prompts import classify_intent
        from catalog_chat.shared.schemas import Intent

        assert classify_intent("Which PHIL courses are open?", departments=["PHIL"]) == (
            Intent.DEPARTMENT_LOOKUP
        )
        assert classify_intent("Any philosophy courses?", departments=["PHIL"]) == Intent.GENERAL

    @pytest.mark.parametrize(
        "question",
        ["Where does Bioinformatics meet?", "What is the location of MUS 120?", "Meeting times?"],
    )
    def test_classify_location(self, question):
        """Location keywords select the location intent."""
        from catalog_chat.rag.prompts import classify_intent
        from catalog_chat.shared.schemas import Intent

        assert classify_intent(question) == Intent.LOCATION_LOOKUP

    def test_classify_general(self):
        """Anything else is general."""
        from catalog_chat.rag.prompts import classify_intent
        from catalog_chat.shared.schemas import Intent

        assert classify_intent("Can I learn guitar this semester?") == Intent.GENERAL

    def test_every_intent_has_a_prompt(self):
        """The intent table covers every intent; general is the generic prompt."""
        from catalog_chat.rag.prompts import GENERIC_SYSTEM_PROMPT, SYSTEM_PROMPTS
        from catalog_chat.shared.schemas import Intent

        assert set(SYSTEM_PROMPTS) == set(Intent)
        assert SYSTEM_PROMPTS[Intent.GENERAL] == GENERIC_SYSTEM_PROMPT

    def test_generate_system_message(self):
        """The system message follows the classified intent."""
        from catalog_chat.rag.prompts import SYSTEM_PROMPTS, generate_system_message
        from catalog_chat.shared.schemas import Intent

        message = generate_system_message("Where is KA 311?")

        assert message == SYSTEM_PROMPTS[Intent.LOCATION_LOOKUP]


# ─────────────────────────────────────────────────────────────────────────────
# Router Tests
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def router(metadata_index, stub_search, stub_llm):
    """Router over the sample index with stand-in services."""
    from catalog_chat.rag.router import Router

    return Router(metadata_index, stub_search, stub_llm)


class TestRouter:
    """Tests for question routing."""

    def test_direct_lookup_skips_vector_store(self, router, stub_search, stub_llm):
        """Instructor questions are answered from the schedule alone."""
        answer = router.answer("What does Bruce Wayne teach?")

        assert "The Dark Knight's Tactics" in answer
        assert answer.startswith("Here are the courses taught by Bruce Wayne:")
        assert stub_search.queries == []
        assert stub_llm.calls == []

    def test_alias_resolves_to_canonical(self, router, stub_search):
        """A nickname is resolved before the lookup."""
        answer = router.answer("What courses is Phil Peterson teaching?")

        assert "Philip Peterson" in answer
        assert "Great Philosophical Questions" in answer
        assert "41876" in answer
        assert stub_search.queries == []

    def test_alias_registered_elsewhere(self, router):
        """Aliases match schedule entries filed under the nickname."""
        answer = router.answer("I would like to take a Rhetoric course from Phil Choong. What can I take?")

        assert "Philip Choong" in answer
        assert "Written Communication I" in answer

    def test_full_rendering_in_direct_answer(self, router):
        """Direct answers use the full field listing."""
        answer = router.answer("What does batman teach?")

        assert "Building:".ljust(25) + "Wayne Tower" in answer.splitlines()
        assert answer.rstrip().endswith("-" * 50)

    def test_instructor_known_only_from_schedule(self, router, stub_search):
        """Instructors missing from the registry are still found by name."""
        answer = router.answer("What is Sheryl Davis teaching?")

        assert "Black Activists & Visionaries" in answer
        assert stub_search.queries == []

    def test_instructor_without_courses(self, sample_courses, stub_search, stub_llm, registry):
        """A registered instructor with nothing scheduled gets a plain message."""
        from catalog_chat.catalog.metadata import MetadataIndex
        from catalog_chat.rag.router import Router

        index = MetadataIndex(
            [c for c in sample_courses if c.instructor_last_name != "Peterson"],
            registry=registry,
        )
        router = Router(index, stub_search, stub_llm)

        assert router.answer("What is Phil Peterson teaching?") == "No courses found for Philip Peterson."
        assert stub_search.queries == []

    def test_empty_index_is_an_error(self, stub_search, stub_llm, registry):
        """Direct lookup without course data raises NoCourseDataError."""
        from catalog_chat.catalog.metadata import MetadataIndex
        from catalog_chat.rag.router import Router
        from catalog_chat.shared.exceptions import NoCourseDataError

        router = Router(MetadataIndex([], registry=registry), stub_search, stub_llm)

        with pytest.raises(NoCourseDataError):
            router.answer("What is Phil Peterson teaching?")

    def test_missing_index_is_an_error(self, stub_search, stub_llm, registry):
        """Direct lookup with no index at all raises NoCourseDataError."""
        from catalog_chat.rag.router import Router
        from catalog_chat.shared.exceptions import NoCourseDataError

        router = Router(None, stub_search, stub_llm, registry=registry)

        with pytest.raises(NoCourseDataError):
            router.answer("What does Batman teach?")

    def test_vector_matches_go_to_llm(self, router, stub_search, stub_llm):
        """Matched documents are listed in the system prompt."""
        stub_search.documents = [["Title Short Desc: Bioinformatics. Building: KA. Room: 311"]]
        stub_llm.reply = "Bioinformatics meets in KA 311."

        answer = router.answer("Where does Bioinformatics meet?")

        assert answer == "Bioinformatics meets in KA 311."
        assert stub_search.queries == ["Where does Bioinformatics meet?"]
        question, system_prompt = stub_llm.calls[0]
        assert question == "Where does Bioinformatics meet?"
        assert "- Title Short Desc: Bioinformatics. Building: KA. Room: 311\n" in system_prompt
        assert system_prompt.startswith("Based on the available information")

    def test_no_matches_uses_generic_prompt(self, router, stub_search, stub_llm):
        """Without matches the LLM gets the generic system prompt."""
        from catalog_chat.rag.prompts import GENERIC_SYSTEM_PROMPT

        router.answer("Is there a course on underwater basket weaving?")

        assert stub_llm.last_system_prompt == GENERIC_SYSTEM_PROMPT

    def test_no_matches_with_intent_prompts(self, metadata_index, stub_search, stub_llm):
        """With intent prompts enabled the fallback follows the classifier."""
        from catalog_chat.rag.prompts import SYSTEM_PROMPTS
        from catalog_chat.rag.router import Router
        from catalog_chat.shared.schemas import Intent

        router = Router(metadata_index, stub_search, stub_llm, use_intent_prompts=True)

        router.answer("Which BIOL classes are there?")
        assert stub_llm.last_system_prompt == SYSTEM_PROMPTS[Intent.DEPARTMENT_LOOKUP]

        router.answer("Where is the chemistry lab?")
        assert stub_llm.last_system_prompt == SYSTEM_PROMPTS[Intent.LOCATION_LOOKUP]

    def test_llm_error_propagates(self, router, stub_llm):
        """LLM errors reach the caller unchanged."""
        from catalog_chat.shared.exceptions import LLMError

        stub_llm.error = LLMError("ChatCompletion failed: quota")

        with pytest.raises(LLMError, match="quota"):
            router.answer("Can I learn guitar this semester?")

    def test_unexpected_llm_error_is_wrapped(self, router, stub_llm):
        """Other exceptions from the LLM client are wrapped with their cause."""
        from catalog_chat.shared.exceptions import LLMError

        stub_llm.error = ConnectionError("reset")

        with pytest.raises(LLMError) as exc_info:
            router.answer("Can I learn guitar this semester?")

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_vector_error_is_wrapped(self, router, stub_search, stub_llm):
        """Vector store failures are reported and the LLM is not called."""
        from catalog_chat.shared.exceptions import VectorStoreError

        stub_search.error = RuntimeError("server down")

        with pytest.raises(VectorStoreError):
            router.answer("Can I learn guitar this semester?")
        assert stub_llm.calls == []

    def test_empty_question(self, router, stub_search, stub_llm):
        """Blank questions are not routed."""
        assert router.answer("   ") == "Please enter a valid query."
        assert stub_search.queries == []
        assert stub_llm.calls == []

    def test_short_schedule_name_needs_whole_word(self, stub_search, stub_llm, registry):
        """A short instructor name inside another word is not an instructor question."""
        from catalog_chat.catalog.metadata import MetadataIndex
        from catalog_chat.rag.router import Router
        from catalog_chat.shared.schemas import Course

        index = MetadataIndex(
            [Course(subject="CS", crn="40001", title="Data Structures", instructor_last_name="Ng")],
            registry=registry,
        )
        router = Router(index, stub_search, stub_llm)

        assert router.answer("Which classes meet in the evening?") == "stub answer"
        assert stub_search.queries == ["Which classes meet in the evening?"]

        answer = router.answer("What does Ng teach?")
        assert answer.startswith("Here are the courses taught by Ng:")

    def test_courses_for_compact(self, router):
        """courses_for renders the compact listing."""
        answer = router.courses_for("Phil Peterson")

        assert answer == (
            "Here are the courses taught by Philip Peterson:\n"
            "Great Philosophical Questions, Section: 03, CRN: 41876 in KA, Room 263"
        )

    def test_courses_for_edge_cases(self, router):
        """Empty and unknown terms give plain messages."""
        assert router.courses_for("  ") == "No valid instructor found for '  '."
        assert router.courses_for("Nobody") == "No courses found for Nobody."


# ─────────────────────────────────────────────────────────────────────────────
# Router Construction Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestBuildRouterInjection:
    """Tests for collaborators passed to build_router."""

    def test_empty_index_is_kept(self, stub_search, stub_llm, registry):
        """An injected empty index is used as given, not replaced by the CSV."""
        from catalog_chat.app import build_router
        from catalog_chat.catalog.metadata import MetadataIndex
        from catalog_chat.shared.exceptions import NoCourseDataError

        empty = MetadataIndex([], registry=registry)

        with patch("catalog_chat.app.load_index") as load_index:
            router = build_router(
                index=empty, search=stub_search, llm=stub_llm, index_courses=False
            )

        load_index.assert_not_called()
        assert router.index is empty
        with pytest.raises(NoCourseDataError):
            router.answer("What does Philip Peterson teach?")


# ─────────────────────────────────────────────────────────────────────────────
# LLM Client Tests
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def gemini():
    """GeminiChatClient with a mocked SDK module."""
    from catalog_chat.rag.llm import GeminiChatClient

    client = GeminiChatClient(api_key="test-key", timeout=5, max_attempts=2)
    client._client = MagicMock()
    return client


class TestGeminiChatClient:
    """Tests for the Gemini chat client."""

    def test_requires_api_key(self):
        """A missing key is a configuration error."""
        from catalog_chat.rag.llm import GeminiChatClient
        from catalog_chat.shared.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            GeminiChatClient(api_key="")

    def test_complete(self, gemini):
        """System prompt and substituted question are sent with a timeout."""
        model = gemini._client.GenerativeModel.return_value
        model.generate_content.return_value = MagicMock(text=" Philip teaches PHIL 110. ")

        answer = gemini.complete("What is Phil Peterson teaching?", "Be brief.")

        assert answer == "Philip teaches PHIL 110."
        kwargs = gemini._client.GenerativeModel.call_args.kwargs
        assert kwargs["system_instruction"] == "Be brief."
        model.generate_content.assert_called_once_with(
            "What is Philip Peterson teaching?", request_options={"timeout": 5}
        )

    def test_retry_then_error(self, gemini):
        """Failures are retried once, then raised as LLMError."""
        from catalog_chat.shared.exceptions import LLMError

        model = gemini._client.GenerativeModel.return_value
        model.generate_content.side_effect = TimeoutError("deadline exceeded")

        with patch("tenacity.nap.time.sleep"):
            with pytest.raises(LLMError) as exc_info:
                gemini.complete("Hello", "system")

        assert model.generate_content.call_count == 2
        assert isinstance(exc_info.value.__cause__, TimeoutError)
        assert str(exc_info.value).startswith("ChatCompletion failed")

    def test_empty_response(self, gemini):
        """An empty completion is an error."""
        from catalog_chat.shared.exceptions import LLMError

        model = gemini._client.GenerativeModel.return_value
        model.generate_content.return_value = MagicMock(text="  ")

        with pytest.raises(LLMError):
            gemini.complete("Hello", "system")
