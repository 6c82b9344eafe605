"""
Aliases Module - Instructor alias registry and name canonicalization.
=====================================================================

Schedules, students and colleagues spell instructor names differently
("Phil Peterson" vs "Philip Peterson"). The registry maps every known variant
to one canonical name so that lookups and displays agree.

Two operations:
- canonicalize(): the whole input is a name, return its canonical form
- substitute_aliases(): rewrite every alias occurring inside free text
"""

import re
from collections.abc import Iterable
from typing import Optional

from catalog_chat.shared.logging import get_logger
from catalog_chat.shared.schemas import Instructor

logger = get_logger(__name__)


DEFAULT_INSTRUCTORS: tuple[Instructor, ...] = (
    Instructor(
        canonical_name="Philip Peterson",
        aliases=frozenset({"Phil Peterson", "Philip Peterson", "Prof. Peterson"}),
    ),
    Instructor(
        canonical_name="Philip Choong",
        aliases=frozenset({"Phil Choong", "Philip Choong", "Prof. Choong"}),
    ),
)


class AliasRegistry:
    """
    Immutable mapping from instructor name variants to canonical names.

    Registry order matters: when two instructors claim the same alias, the
    first one keeps it.

    Example:
        >>> registry = AliasRegistry()
        >>> registry.canonicalize("  phil peterson ")
        'Philip Peterson'
        >>> registry.substitute_aliases("Is Phil Choong teaching?")
        'Is Philip Choong teaching?'
    """

    def __init__(self, instructors: Optional[Iterable[Instructor]] = None):
        self._instructors: tuple[Instructor, ...] = tuple(
            DEFAULT_INSTRUCTORS if instructors is None else instructors
        )

        lookup: dict[str, str] = {}
        for instructor in self._instructors:
            for name in instructor.all_names():
                key = name.strip().lower()
                owner = lookup.get(key)
                if owner is None:
                    lookup[key] = instructor.canonical_name
                elif owner != instructor.canonical_name:
                    logger.warning(
                        f"Alias '{name}' is claimed by both '{owner}' and "
                        f"'{instructor.canonical_name}'; keeping '{owner}'"
                    )
        self._lookup = lookup

        # Longest alternatives first so "Phil Peterson" beats a bare "Phil"
        keys = sorted(lookup, key=len, reverse=True)
        self._pattern: Optional[re.Pattern[str]] = (
            re.compile("|".join(re.escape(k) for k in keys), re.IGNORECASE) if keys else None
        )

        logger.debug(
            f"Alias registry built: {len(self._instructors)} instructors, "
            f"{len(lookup)} names"
        )

    @classmethod
    def from_config(cls, entries: Iterable) -> "AliasRegistry":
        """Build a registry from InstructorConfig entries, or the defaults if empty."""
        instructors = [
            Instructor(
                canonical_name=entry.canonical_name.strip(),
                aliases=frozenset(a.strip() for a in entry.aliases if a.strip()),
            )
            for entry in entries
        ]
        return cls(instructors or None)

    @property
    def instructors(self) -> tuple[Instructor, ...]:
        """Registered instructors in registry order."""
        return self._instructors

    def canonicalize(self, name: str) -> str:
        """
        Return the canonical name for a name variant.

        The trimmed input is compared case-insensitively with every alias.
        Unknown names come back trimmed but otherwise unchanged.
        """
        trimmed = name.strip()
        if not trimmed:
            return trimmed
        return self._lookup.get(trimmed.lower(), trimmed)

    def substitute_aliases(self, text: str) -> str:
        """Replace every alias occurring in ``text`` with its canonical name."""
        if not text or self._pattern is None:
            return text
        return self._pattern.sub(lambda m: self._lookup[m.group(0).lower()], text)

    def find_instructor(self, text: str) -> Optional[str]:
        """Canonical name of the first registered instructor mentioned in ``text``."""
        lowered = text.lower()
        for instructor in self._instructors:
            for name in instructor.all_names():
                if name.lower() in lowered:
                    return self._lookup.get(name.strip().lower(), instructor.canonical_name)
        return None

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._lookup

    def __len__(self) -> int:
        return len(self._instructors)


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


_default_registry: Optional[AliasRegistry] = None


def get_default_registry() -> AliasRegistry:
    """Get or create the registry with the built-in instructors."""
    global _default_registry
    if _default_registry is None:
        _default_registry = AliasRegistry()
    return _default_registry


def canonicalize(name: str) -> str:
    """Canonicalize a name with the default registry."""
    return get_default_registry().canonicalize(name)


def substitute_aliases(text: str) -> str:
    """Substitute aliases in free text with the default registry."""
    return get_default_registry().substitute_aliases(text)
