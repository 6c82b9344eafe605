"""
Metadata Module - In-memory index over the loaded courses.
==========================================================

Holds the course list together with the derived lists of unique canonical
instructor names and unique subject (department) codes. Built once at startup
and read-only afterwards.
"""

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

from catalog_chat.catalog.aliases import AliasRegistry, get_default_registry
from catalog_chat.catalog.loader import load_courses
from catalog_chat.shared.logging import get_logger
from catalog_chat.shared.schemas import Course

logger = get_logger(__name__)


def unique_instructors(courses: Iterable[Course], registry: AliasRegistry) -> list[str]:
    """Canonical instructor names in first-seen order."""
    seen: set[str] = set()
    names = []
    for course in courses:
        name = registry.canonicalize(course.instructor_name)
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


def unique_subjects(courses: Iterable[Course]) -> list[str]:
    """Subject codes in first-seen order."""
    seen: set[str] = set()
    subjects = []
    for course in courses:
        if course.subject not in seen:
            seen.add(course.subject)
            subjects.append(course.subject)
    return subjects


class MetadataIndex:
    """
    Read-only view of the course catalog.

    Example:
        >>> index = MetadataIndex.from_csv("schedule.csv")
        >>> index.departments[:3]
        ('AAS', 'ACC', 'ADV')
        >>> index.courses_taught_by("Philip Peterson")
        [Course(subject='PHIL', ...)]
    """

    def __init__(
        self,
        courses: Iterable[Course],
        header: str = "",
        registry: Optional[AliasRegistry] = None,
    ):
        self._registry = registry if registry is not None else get_default_registry()
        self._courses: tuple[Course, ...] = tuple(courses)
        self._header = header
        self._canonical_names: tuple[str, ...] = tuple(
            self._registry.canonicalize(c.instructor_name) for c in self._courses
        )
        self._instructors = tuple(unique_instructors(self._courses, self._registry))
        self._departments = tuple(unique_subjects(self._courses))

        logger.info(
            f"Metadata index built: {len(self._courses)} courses, "
            f"{len(self._instructors)} instructors, {len(self._departments)} departments"
        )

    @classmethod
    def from_csv(
        cls,
        csv_path: Union[str, Path],
        registry: Optional[AliasRegistry] = None,
        encoding: str = "utf-8-sig",
    ) -> "MetadataIndex":
        """Load the schedule CSV and build the index."""
        header, courses = load_courses(csv_path, encoding=encoding)
        return cls(courses, header=header, registry=registry)

    @property
    def courses(self) -> tuple[Course, ...]:
        return self._courses

    @property
    def instructors(self) -> tuple[str, ...]:
        return self._instructors

    @property
    def departments(self) -> tuple[str, ...]:
        return self._departments

    @property
    def header(self) -> str:
        return self._header

    @property
    def registry(self) -> AliasRegistry:
        return self._registry

    def is_empty(self) -> bool:
        return not self._courses

    def courses_taught_by(self, name: str) -> list[Course]:
        """
        Courses whose instructor is ``name``.

        A course matches when its trimmed "first last" name equals ``name``
        case-insensitively, or canonicalizes to it.
        """
        wanted = name.strip().lower()
        if not wanted:
            return []
        return [
            course
            for course, canonical in zip(self._courses, self._canonical_names)
            if course.instructor_name.lower() == wanted or canonical.lower() == wanted
        ]

    def find_instructor_in(self, text: str) -> Optional[str]:
        """Longest known instructor name occurring as whole words in ``text``, if any."""
        lowered = text.lower()
        found = [
            name
            for name in self._instructors
            if name and re.search(rf"\b{re.escape(name.lower())}\b", lowered)
        ]
        if not found:
            return None
        return max(found, key=len)

    def __len__(self) -> int:
        return len(self._courses)
