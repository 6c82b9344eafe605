"""
Configuration Module - Load and validate application settings.
==============================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Top-level environment variables (GEMINI_API_KEY, CATALOG_CSV, CHROMA_HOST, ...)
override the matching YAML values through the get_effective_* accessors.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


class CatalogConfig(BaseModel):
    """Course data source."""

    csv_path: str = "data/Fall 2024 Class Schedule 08082024.csv"
    encoding: str = "utf-8-sig"


class InstructorConfig(BaseModel):
    """One alias registry entry."""

    canonical_name: str
    aliases: list[str] = Field(default_factory=list)


class VectorStoreConfig(BaseModel):
    """ChromaDB connection and collection settings."""

    mode: str = "http"  # "http" or "persistent"
    host: str = "localhost"
    port: int = 8000
    persist_dir: str = "data/index"
    course_collection: str = "courses-collection"
    instructor_collection: str = "instructors-collection"
    top_k: int = 5
    max_attempts: int = 2


class SBERTConfig(BaseModel):
    """SBERT embeddings settings."""

    model_name: str = "all-MiniLM-L6-v2"
    device: str = "auto"
    batch_size: int = 32


class GeminiEmbeddingConfig(BaseModel):
    """Gemini embeddings settings."""

    model_name: str = "text-embedding-004"
    batch_size: int = 100


class EmbeddingsConfig(BaseModel):
    """Embeddings provider settings."""

    provider: str = "sbert"
    sbert: SBERTConfig = Field(default_factory=SBERTConfig)
    gemini: GeminiEmbeddingConfig = Field(default_factory=GeminiEmbeddingConfig)


class GenerationConfig(BaseModel):
    """LLM chat completion settings."""

    model_name: str = "gemini-1.5-flash"
    temperature: float = 0.2
    max_output_tokens: int = 1024
    timeout: float = 60.0
    max_attempts: int = 2


class RoutingConfig(BaseModel):
    """Question routing settings."""

    # Pick the fallback system prompt with the intent classifier instead of
    # always using the generic one.
    use_intent_prompts: bool = False


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main application settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (from environment only)
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )

    # Top-level environment overrides
    catalog_csv: Optional[str] = Field(default=None, validation_alias="CATALOG_CSV")
    chroma_host: Optional[str] = Field(default=None, validation_alias="CHROMA_HOST")
    chroma_port: Optional[int] = Field(default=None, validation_alias="CHROMA_PORT")
    embedding_provider: Optional[str] = Field(default=None, validation_alias="EMBEDDING_PROVIDER")
    gemini_model: Optional[str] = Field(default=None, validation_alias="GEMINI_MODEL")
    top_k: Optional[int] = Field(default=None, validation_alias="TOP_K")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    instructors: list[InstructorConfig] = Field(default_factory=list)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _project_root: Path = PROJECT_ROOT

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v: Any) -> str:
        """Allow an empty key; the LLM client reports it when it is needed."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._project_root

    def resolve_path(self, path: str) -> Path:
        """Resolve a configured path relative to the project root."""
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return self._project_root / candidate

    def get_effective_csv_path(self) -> Path:
        """Get the course CSV path (env override or config)."""
        return self.resolve_path(self.catalog_csv or self.catalog.csv_path)

    def get_effective_chroma_host(self) -> str:
        """Get the ChromaDB host (env override or config)."""
        return self.chroma_host or self.vector_store.host

    def get_effective_chroma_port(self) -> int:
        """Get the ChromaDB port (env override or config)."""
        if self.chroma_port is not None:
            return self.chroma_port
        return self.vector_store.port

    def get_effective_embedding_provider(self) -> str:
        """Get the effective embedding provider (env override or config)."""
        if self.embedding_provider:
            return self.embedding_provider.lower()
        return self.embeddings.provider.lower()

    def get_effective_model(self) -> str:
        """Get the chat model name (env override or config)."""
        return self.gemini_model or self.generation.model_name

    def get_effective_top_k(self) -> int:
        """Get the effective top-k value (env override or config)."""
        if self.top_k is not None:
            return self.top_k
        return self.vector_store.top_k

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)
    return Settings(**yaml_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Example:
        >>> settings = get_settings()
        >>> print(settings.vector_store.top_k)
        5
    """
    return _create_settings()


def reload_settings() -> Settings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
