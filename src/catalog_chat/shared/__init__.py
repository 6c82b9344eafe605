"""
Shared Module - Configuration, logging, schemas and errors.
===========================================================

- config: Settings from config/settings.yaml and the environment
- logging: Rich console logging setup
- schemas: Pydantic data models (Course, Instructor, Intent)
- exceptions: Error taxonomy
"""

from catalog_chat.shared.config import Settings, get_settings, reload_settings
from catalog_chat.shared.exceptions import (
    CatalogChatError,
    ConfigurationError,
    ExternalServiceError,
    LLMError,
    NoCourseDataError,
    VectorStoreError,
)
from catalog_chat.shared.logging import get_console, get_logger, setup_logging
from catalog_chat.shared.schemas import COURSE_FIELDS, Course, Instructor, Intent

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "reload_settings",
    # Errors
    "CatalogChatError",
    "ConfigurationError",
    "ExternalServiceError",
    "LLMError",
    "NoCourseDataError",
    "VectorStoreError",
    # Logging
    "get_console",
    "get_logger",
    "setup_logging",
    # Schemas
    "COURSE_FIELDS",
    "Course",
    "Instructor",
    "Intent",
]
