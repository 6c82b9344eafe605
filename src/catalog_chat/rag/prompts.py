"""
Prompts Module - System prompts and question intent classification.
====================================================================

Provides:
- The system prompt built from vector store matches
- The generic fallback prompt
- classify_intent(): a pure classifier mapping a question to an Intent
- SYSTEM_PROMPTS: the Intent -> system prompt table
"""

import re
from collections.abc import Iterable, Sequence

from catalog_chat.shared.schemas import Intent


# ─────────────────────────────────────────────────────────────────────────────
# System Prompts
# ─────────────────────────────────────────────────────────────────────────────


MATCHES_PREAMBLE = "Based on the available information, here are the relevant matches:\n\n"
MATCHES_CLOSING = "\nPlease use this information to answer the user's question."

GENERIC_SYSTEM_PROMPT = (
    "Provide accurate information based on the context of university courses and instructors."
)

SYSTEM_PROMPTS: dict[Intent, str] = {
    Intent.INSTRUCTOR_LOOKUP: (
        "You are a course catalog assistant. The user is asking about an instructor. "
        "List the courses they teach this term with section, CRN, days and times."
    ),
    Intent.DEPARTMENT_LOOKUP: (
        "You are a course catalog assistant. The user is asking about a department. "
        "Summarize the courses offered by that subject this term."
    ),
    Intent.LOCATION_LOOKUP: (
        "You are a course catalog assistant. The user is asking where or when a class "
        "meets. Answer with the building, room, meeting days and times."
    ),
    Intent.GENERAL: GENERIC_SYSTEM_PROMPT,
}

LOCATION_KEYWORDS = ("location", "where", "meeting")


def build_matches_prompt(documents: Sequence[Sequence[str]]) -> str:
    """System prompt listing the matched documents, one bullet each."""
    prompt = MATCHES_PREAMBLE
    for document in documents:
        prompt += f"- {' '.join(document)}\n"
    prompt += MATCHES_CLOSING
    return prompt


# ─────────────────────────────────────────────────────────────────────────────
# Intent Classification
# ─────────────────────────────────────────────────────────────────────────────


def classify_intent(
    question: str,
    instructors: Iterable[str] = (),
    departments: Iterable[str] = (),
) -> Intent:
    """
    Decide what a question is asking about.

    Checked in order: a known instructor name anywhere in the question, a
    department code as a whole word, then the location keywords.

    Example:
        >>> classify_intent("Where does Bioinformatics meet?")
        <Intent.LOCATION_LOOKUP: 'location_lookup'>
    """
    lowered = question.lower()

    if any(name and name.lower() in lowered for name in instructors):
        return Intent.INSTRUCTOR_LOOKUP

    for code in departments:
        if code and re.search(rf"\b{re.escape(code.lower())}\b", lowered):
            return Intent.DEPARTMENT_LOOKUP

    if any(keyword in lowered for keyword in LOCATION_KEYWORDS):
        return Intent.LOCATION_LOOKUP

    return Intent.GENERAL


def generate_system_message(
    question: str,
    instructors: Iterable[str] = (),
    departments: Iterable[str] = (),
) -> str:
    """System prompt for a question, chosen by its intent."""
    return SYSTEM_PROMPTS[classify_intent(question, instructors, departments)]
