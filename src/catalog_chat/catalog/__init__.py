"""
Catalog Module - Course records, instructor aliases and rendering.
==================================================================

- loader: Schedule CSV → Course records
- aliases: Instructor alias registry and canonicalization
- metadata: In-memory index with unique instructors and departments
- formatting: Compact and full text renderings
"""

from catalog_chat.catalog.aliases import (
    AliasRegistry,
    DEFAULT_INSTRUCTORS,
    canonicalize,
    substitute_aliases,
)
from catalog_chat.catalog.formatting import (
    format_compact,
    format_document,
    format_full,
    pretty_print_documents,
)
from catalog_chat.catalog.loader import load_courses
from catalog_chat.catalog.metadata import MetadataIndex

__all__ = [
    # Aliases
    "AliasRegistry",
    "DEFAULT_INSTRUCTORS",
    "canonicalize",
    "substitute_aliases",
    # Formatting
    "format_compact",
    "format_document",
    "format_full",
    "pretty_print_documents",
    # Loading
    "load_courses",
    "MetadataIndex",
]
