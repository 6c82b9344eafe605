"""
LLM Module - Chat completion client.
====================================

Provides:
- ChatCompletionClient: the narrow interface the question router depends on
- GeminiChatClient: implementation on the Gemini API with a request timeout
  and bounded retries
"""

from abc import ABC, abstractmethod
from typing import Optional

from tenacity import Retrying, stop_after_attempt, wait_exponential

from catalog_chat.catalog.aliases import AliasRegistry, get_default_registry
from catalog_chat.shared.config import get_settings
from catalog_chat.shared.exceptions import ConfigurationError, LLMError
from catalog_chat.shared.logging import get_logger

logger = get_logger(__name__)


class ChatCompletionClient(ABC):
    """Answers a question under a system prompt."""

    @abstractmethod
    def complete(self, question: str, system_prompt: str) -> str:
        """
        Run one chat completion.

        Raises:
            LLMError: If the completion could not be produced
        """


class GeminiChatClient(ChatCompletionClient):
    """
    Chat completion with Gemini.

    The system prompt is passed as the model's system instruction and the
    question as the user turn. Instructor aliases in the question are replaced
    by canonical names before sending.

    Example:
        >>> client = GeminiChatClient()
        >>> client.complete("Which guitar classes are offered?", GENERIC_SYSTEM_PROMPT)
        'Guitar and Bass Lessons (MUS 120) ...'
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        api_key: Optional[str] = None,
        registry: Optional[AliasRegistry] = None,
    ):
        settings = get_settings()
        gen_config = settings.generation

        self.model_name = model_name or settings.get_effective_model()
        self.temperature = temperature if temperature is not None else gen_config.temperature
        self.max_tokens = max_tokens or gen_config.max_output_tokens
        self.timeout = timeout or gen_config.timeout
        self.max_attempts = max_attempts or gen_config.max_attempts
        self.api_key = api_key or settings.gemini_api_key
        self._registry = registry if registry is not None else get_default_registry()
        self._client = None

        if not self.api_key:
            raise ConfigurationError(
                "API key is missing. Please set the GEMINI_API_KEY environment variable."
            )

        logger.info(
            f"Chat client initialized: model={self.model_name}, "
            f"temp={self.temperature}, timeout={self.timeout}s"
        )

    @property
    def client(self):
        """Lazy-load the configured Gemini module."""
        if self._client is None:
            try:
                import google.generativeai as genai
            except ImportError:
                raise ConfigurationError(
                    "google-generativeai package not installed. "
                    "Run: pip install google-generativeai"
                )
            genai.configure(api_key=self.api_key)
            self._client = genai
        return self._client

    def _generate(self, question: str, system_prompt: str) -> str:
        model = self.client.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_prompt,
            generation_config={
                "temperature": self.temperature,
                "max_output_tokens": self.max_tokens,
            },
        )
        response = model.generate_content(question, request_options={"timeout": self.timeout})
        return response.text

    def complete(self, question: str, system_prompt: str) -> str:
        question = self._registry.substitute_aliases(question)
        logger.debug(f"Chat completion for: {question[:60]}")

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            reraise=True,
        )
        try:
            text = retrying(self._generate, question, system_prompt)
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise LLMError(f"ChatCompletion failed: {e}") from e

        if not text or not text.strip():
            raise LLMError("ChatCompletion failed: empty response")
        return text.strip()
