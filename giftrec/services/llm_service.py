"""LLM Service - Abstraction layer for generative model calls.

This module provides a unified interface for calling different LLM providers
(OpenAI-compatible endpoints, Gemini) with consistent error handling.

Interface Contract:
- call() returns the raw response text
- All failures raise LLMServiceError; ``retryable`` tells callers whether a
  second attempt is worthwhile (network error, timeout, rate limit, 5xx)
- Callers should not depend on specific LLM provider details
- API key, base URL and model are injected, defaulting to ``config``
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import BoundedSemaphore, Lock

import google.generativeai as genai
import openai
from google.api_core import exceptions as google_exceptions
from openai import OpenAI

from config import (
    GEMINI_API_KEY,
    GEMINI_MODEL,
    LLM_MAX_CONCURRENCY,
    LLM_PROVIDER,
    LLM_QUEUE_TIMEOUT,
    LLM_TIMEOUT_SECONDS,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
)

logger = logging.getLogger(__name__)


class LLMServiceError(Exception):
    """Raised when LLM call fails."""

    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class LLMRateLimitError(LLMServiceError):
    """Raised when the concurrency gate is saturated. Always retryable."""

    def __init__(self, message: str):
        super().__init__(message, retryable=True)


class BaseLLMService(ABC):
    """Abstract base class for LLM services."""

    @abstractmethod
    def call(self, prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
        """Call the LLM with a prompt.

        Args:
            prompt: The prompt to send to the LLM
            json_mode: If True, expect JSON response
            timeout: Per-request timeout in seconds (provider default if None)

        Returns:
            str: The LLM response text

        Raises:
            LLMServiceError: If the call fails
        """
        pass


class OpenAIService(BaseLLMService):
    """OpenAI (or OpenAI-compatible endpoint) service implementation."""

    def __init__(
        self,
        model: str = OPENAI_MODEL,
        *,
        api_key: str | None = OPENAI_API_KEY,
        base_url: str | None = OPENAI_BASE_URL,
        timeout: float = LLM_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        """Get or create OpenAI client (lazy initialization)."""
        if self._client is None:
            if not self.api_key:
                raise LLMServiceError("OPENAI_API_KEY environment variable not set")
            # Retries are owned by the caller, not the SDK
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def call(self, prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
        """Call OpenAI model."""
        client = self._get_client()
        kwargs: dict = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": "You are a gift consultant who understands relationship dynamics and gift etiquette.",
                },
                {"role": "user", "content": prompt},
            ],
            "timeout": timeout or self.timeout,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = client.chat.completions.create(**kwargs)
        except (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError) as e:
            # APITimeoutError is a subclass of APIConnectionError
            raise LLMServiceError(f"OpenAI call failed: {e}", retryable=True) from e
        except openai.APIStatusError as e:
            raise LLMServiceError(
                f"OpenAI call failed with HTTP {e.status_code}: {e}",
                retryable=e.status_code >= 500,
            ) from e
        except Exception as e:
            raise LLMServiceError(f"OpenAI call failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMServiceError("Empty response from OpenAI", retryable=True)
        return content


class GeminiService(BaseLLMService):
    """Google Gemini LLM service implementation."""

    _RETRYABLE = (
        google_exceptions.DeadlineExceeded,
        google_exceptions.ServiceUnavailable,
        google_exceptions.ResourceExhausted,
        google_exceptions.InternalServerError,
    )

    def __init__(
        self,
        model: str = GEMINI_MODEL,
        *,
        api_key: str | None = GEMINI_API_KEY,
        timeout: float = LLM_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._configured = False

    def _configure(self) -> None:
        """Configure Gemini API (lazy initialization)."""
        if self._configured:
            return
        if not self.api_key:
            raise LLMServiceError("GEMINI_API_KEY or GOOGLE_API_KEY environment variable not set")
        genai.configure(api_key=self.api_key)
        self._configured = True

    def call(self, prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
        """Call Gemini model."""
        self._configure()
        gen_config = None
        if json_mode:
            gen_config = genai.GenerationConfig(
                response_mime_type="application/json"
            )
        try:
            model = genai.GenerativeModel(self.model)
            response = model.generate_content(
                prompt,
                generation_config=gen_config,
                request_options={"timeout": timeout or self.timeout},
            )
            text = response.text
        except self._RETRYABLE as e:
            raise LLMServiceError(f"Gemini call failed: {e}", retryable=True) from e
        except Exception as e:
            raise LLMServiceError(f"Gemini call failed: {e}") from e

        if not text:
            raise LLMServiceError("Empty response from Gemini", retryable=True)
        return text


class RateLimitedLLMService(BaseLLMService):
    """Bounded-concurrency gate in front of another LLM service.

    At most ``max_concurrency`` calls run at once. A caller that cannot get a
    slot within ``queue_timeout`` seconds gets LLMRateLimitError rather than
    waiting in an unbounded backlog.
    """

    def __init__(
        self,
        service: BaseLLMService,
        *,
        max_concurrency: int = LLM_MAX_CONCURRENCY,
        queue_timeout: float = LLM_QUEUE_TIMEOUT,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.service = service
        self.max_concurrency = max_concurrency
        self.queue_timeout = queue_timeout
        self._slots = BoundedSemaphore(max_concurrency)

    def call(self, prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
        if not self._slots.acquire(timeout=self.queue_timeout):
            logger.warning("[llm] concurrency limit %d reached, rejecting call", self.max_concurrency)
            raise LLMRateLimitError(
                f"LLM concurrency limit of {self.max_concurrency} reached; retry later"
            )
        try:
            return self.service.call(prompt, json_mode=json_mode, timeout=timeout)
        finally:
            self._slots.release()


def build_default_service(provider: str = LLM_PROVIDER) -> BaseLLMService:
    """Create the configured provider behind the shared concurrency gate."""
    if provider == "gemini":
        service: BaseLLMService = GeminiService()
    elif provider == "openai":
        service = OpenAIService()
    else:
        raise LLMServiceError(f"Unknown LLM provider: {provider!r}")
    return RateLimitedLLMService(service)


# Default service instance (can be swapped for testing)
class LLMService:
    """Facade for LLM services with provider switching."""

    _instance: BaseLLMService | None = None
    _lock = Lock()

    @classmethod
    def get_instance(cls) -> BaseLLMService:
        """Get the configured LLM service instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = build_default_service()
            return cls._instance

    @classmethod
    def set_instance(cls, service: BaseLLMService) -> None:
        """Set a custom LLM service (useful for testing)."""
        with cls._lock:
            cls._instance = service

    @classmethod
    def reset(cls) -> None:
        """Reset to default service."""
        with cls._lock:
            cls._instance = None


def call_llm(prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
    """Call the default LLM service."""
    return LLMService.get_instance().call(prompt, json_mode=json_mode, timeout=timeout)
