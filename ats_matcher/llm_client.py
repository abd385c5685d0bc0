"""
LLM API Client Module.

Provides a thin wrapper over the OpenAI SDK for free-text generation against
any OpenAI-compatible endpoint (OpenAI itself, or Gemini through its
compatibility base URL):
- Sync and async text generation
- Per-call sampling parameters
- Single attempt per call: no retries, no backoff
"""

import logging
import time
from typing import Optional

from openai import APIStatusError, AsyncOpenAI, OpenAI, OpenAIError
from pydantic import BaseModel, Field

from ats_matcher.config import LLMSettings
from ats_matcher.errors import ConfigurationError, LLMError

logger = logging.getLogger("ats_matcher.llm")


class GenerationConfig(BaseModel):
    """Sampling parameters sent with each request."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, ge=1)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=2048, ge=1)


ANALYSIS_CONFIG = GenerationConfig()
CREATIVE_CONFIG = GenerationConfig(temperature=0.8)
SHORT_CREATIVE_CONFIG = GenerationConfig(temperature=0.8, max_output_tokens=1024)
SHORT_CONFIG = GenerationConfig(max_output_tokens=1024)


class LLMClient:
    """
    Text-generation client.

    The API key comes from the settings passed in; nothing is read from
    process state here. Failures of any kind surface as LLMError.
    """

    def __init__(
        self,
        settings: LLMSettings,
        client: Optional[OpenAI] = None,
        async_client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the LLM client.

        Args:
            settings: Connection settings. Must carry an API key.
            client: Optional pre-built sync SDK client.
            async_client: Optional pre-built async SDK client.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if not settings.api_key:
            raise ConfigurationError(
                "LLM API key not found. Set LLM_API_KEY (or OPENAI_API_KEY) "
                "or supply a key with the request."
            )

        self.settings = settings
        self.model = settings.model

        # * max_retries=0: callers decide how to degrade, the SDK must not retry
        self.client = client or OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=0,
        )
        self.async_client = async_client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=0,
        )

    def generate(self, prompt: str, config: Optional[GenerationConfig] = None) -> str:
        """
        Generate text for a prompt (sync).

        Args:
            prompt: User prompt.
            config: Sampling parameters (default: ANALYSIS_CONFIG).

        Returns:
            Generated text.

        Raises:
            LLMError: On network errors, non-2xx responses or empty output.
        """
        request_kwargs = self._build_kwargs(prompt, config or ANALYSIS_CONFIG)

        start = time.perf_counter()
        try:
            response = self.client.chat.completions.create(**request_kwargs)
        except OpenAIError as e:
            raise self._wrap_error(e) from e

        return self._parse_response(response, time.perf_counter() - start)

    async def generate_async(self, prompt: str, config: Optional[GenerationConfig] = None) -> str:
        """
        Generate text for a prompt (async).

        Args:
            prompt: User prompt.
            config: Sampling parameters (default: ANALYSIS_CONFIG).

        Returns:
            Generated text.

        Raises:
            LLMError: On network errors, non-2xx responses or empty output.
        """
        request_kwargs = self._build_kwargs(prompt, config or ANALYSIS_CONFIG)

        start = time.perf_counter()
        try:
            response = await self.async_client.chat.completions.create(**request_kwargs)
        except OpenAIError as e:
            raise self._wrap_error(e) from e

        return self._parse_response(response, time.perf_counter() - start)

    def _build_kwargs(self, prompt: str, config: GenerationConfig) -> dict:
        """Build kwargs for chat completion request."""
        request_kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_output_tokens,
        }

        # * top_k is not part of the OpenAI schema; only some endpoints accept it
        if self.settings.send_top_k:
            request_kwargs["extra_body"] = {"top_k": config.top_k}

        return request_kwargs

    def _wrap_error(self, error: OpenAIError) -> LLMError:
        status_code = error.status_code if isinstance(error, APIStatusError) else None
        logger.error(
            "LLM call failed model=%s status=%s error=%s",
            self.model,
            status_code,
            type(error).__name__,
        )
        return LLMError(f"LLM request failed: {error}", status_code=status_code)

    def _parse_response(self, response, duration: float) -> str:
        """Pull the generated text out of a chat completion."""
        usage = getattr(response, "usage", None)
        token_summary = ""
        if usage:
            token_summary = (
                f" prompt={getattr(usage, 'prompt_tokens', None)}"
                f" completion={getattr(usage, 'completion_tokens', None)}"
                f" total={getattr(usage, 'total_tokens', None)}"
            )

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise LLMError("LLM returned no choices")

        content = getattr(choices[0].message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise LLMError("Received empty content from LLM")

        logger.info(
            "LLM success model=%s duration=%.3fs chars=%s%s",
            self.model,
            duration,
            len(content),
            token_summary,
        )
        return content


def get_client(settings: LLMSettings, api_key: Optional[str] = None) -> LLMClient:
    """
    Get a configured LLM client instance.

    Args:
        settings: Base LLM settings.
        api_key: Optional request-scoped key overriding the configured one.

    Returns:
        Configured LLMClient instance.

    Raises:
        ConfigurationError: If no key is available.
    """
    return LLMClient(settings.with_api_key(api_key))


def get_optional_client(settings: LLMSettings, api_key: Optional[str] = None) -> Optional[LLMClient]:
    """Like get_client, but returns None when no key is available."""
    scoped = settings.with_api_key(api_key)
    if not scoped.configured:
        return None
    return LLMClient(scoped)
