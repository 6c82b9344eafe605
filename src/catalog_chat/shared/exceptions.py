"""
Exceptions Module - Error taxonomy for the catalog assistant.
=============================================================

- ConfigurationError: fatal at startup (missing credential, unreadable CSV)
- NoCourseDataError: an instructor was identified but no courses are loaded
- ExternalServiceError: a vector store or LLM call failed

"Nothing found" results are plain answers, never exceptions.
"""


class CatalogChatError(RuntimeError):
    """Base class for all catalog assistant errors."""


class ConfigurationError(CatalogChatError):
    """Raised when the application cannot be configured at startup."""


class NoCourseDataError(CatalogChatError):
    """Raised when a direct lookup is attempted without course data."""

    def __init__(self, message: str = "no course data available"):
        super().__init__(message)


class ExternalServiceError(CatalogChatError):
    """Raised when a call to an external service fails."""


class VectorStoreError(ExternalServiceError):
    """Raised when the vector store cannot be queried or written."""


class LLMError(ExternalServiceError):
    """Raised when the chat completion call fails."""
