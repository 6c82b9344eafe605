"""
Formatting Module - Render course records as readable text.
===========================================================

Renderings:
- compact: one line per course (title, section, CRN, location)
- full: every field on its own line with a fixed-width label column
- document: single-line "Label: value. Label: value" text used for indexing
- pretty_print_documents: operator-facing dump of raw vector store hits
"""

from collections.abc import Iterable, Sequence

from catalog_chat.shared.schemas import Course

LABEL_WIDTH = 25
SEPARATOR = "-" * 50
FIELD_DELIMITER = ". "


def format_compact_line(course: Course) -> str:
    return (
        f"{course.title}, Section: {course.section}, CRN: {course.crn} "
        f"in {course.building}, Room {course.room}"
    )


def format_compact(courses: Iterable[Course]) -> str:
    """One summary line per course."""
    return "\n".join(format_compact_line(course) for course in courses)


def format_full_block(course: Course) -> str:
    """All fields of one course followed by the dash separator."""
    lines = [f"{label + ':':<{LABEL_WIDTH}}{value}" for label, value in course.field_values()]
    lines.append(SEPARATOR)
    return "\n".join(lines)


def format_full(courses: Iterable[Course]) -> str:
    """Full field listings, one block per course."""
    return "\n".join(format_full_block(course) for course in courses)


def format_document(course: Course) -> str:
    """Text stored in the vector store for a course."""
    return FIELD_DELIMITER.join(f"{label}: {value}" for label, value in course.field_values())


def pretty_print_documents(documents: Sequence[Sequence[str]]) -> str:
    """
    Lay out raw matched documents for the console.

    Each document's fields are joined with spaces and split back into
    "Label: value" pairs on ". ". Pieces without a label are kept as they are.
    """
    blocks = []
    for document in documents:
        text = " ".join(document).strip()
        lines = []
        for piece in text.split(FIELD_DELIMITER):
            piece = piece.strip()
            if not piece:
                continue
            label, sep, value = piece.partition(":")
            if sep:
                lines.append(f"{label.strip() + ':':<{LABEL_WIDTH}}{value.strip()}")
            else:
                lines.append(piece)
        lines.append(SEPARATOR)
        blocks.append("\n".join(lines))
    return "\n".join(blocks)
