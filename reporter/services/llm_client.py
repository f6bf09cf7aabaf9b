import logging
from typing import Any, Callable, Dict, Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from reporter.core.config import ClaudeConfig
from reporter.core.errors import (
    AuthenticationError,
    GenerationError,
    ModelUnavailableError,
    RateLimitError,
    UnknownGenerationError,
)

logger = logging.getLogger(__name__)


def classify_error_message(message: str) -> GenerationError:
    """Map a provider error message to a classified GenerationError.

    Checked in order: API key, quota / rate limit, model. Everything else is
    UnknownGenerationError.
    """
    lowered = (message or "").lower()
    if "api_key" in lowered or "api key" in lowered:
        return AuthenticationError()
    if "quota" in lowered or "rate limit" in lowered:
        return RateLimitError()
    if "model" in lowered:
        return ModelUnavailableError()
    return UnknownGenerationError()


def classify_generation_error(exc: BaseException) -> GenerationError:
    """Classify an SDK exception, preferring its type over its message."""
    if isinstance(exc, GenerationError):
        return exc
    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return AuthenticationError()
    if isinstance(exc, anthropic.RateLimitError):
        return RateLimitError()
    return classify_error_message(str(exc))


class LLMClient:
    """Text-in/text-out completion client over the Anthropic Messages API.

    No retries: a failed call surfaces as one classified GenerationError.
    """

    def __init__(
        self,
        config: Optional[ClaudeConfig] = None,
        client: Optional[Any] = None,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        """Initialize client.

        Args:
            config: Optional ClaudeConfig instance
            client: Optional pre-initialized AsyncAnthropic (or test double), reused for every call
            http_client_factory: Optional factory for the httpx.AsyncClient handed to each
                per-call AsyncAnthropic (tests pass one backed by MockTransport)
        """
        self.config = config or ClaudeConfig()
        self._client: Optional[Any] = client
        self._http_client_factory = http_client_factory

    def _new_client(self) -> AsyncAnthropic:
        """Build a client bound to the running event loop. Callers close it."""
        if not self.config.api_key:
            raise AuthenticationError()
        kwargs: Dict[str, Any] = dict(
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            max_retries=0,
        )
        if self._http_client_factory is not None:
            kwargs["http_client"] = self._http_client_factory()
        return AsyncAnthropic(**kwargs)

    def request_kwargs(self, prompt: str) -> Dict[str, Any]:
        """Keyword arguments for `messages.create`."""
        return dict(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            messages=[{"role": "user", "content": prompt}],
        )

    @staticmethod
    def _extract_text(response: Any) -> str:
        parts = []
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "text":
                parts.append(getattr(block, "text", ""))
        return "".join(parts)

    async def _create(self, prompt: str) -> Any:
        if self._client is not None:
            return await self._client.messages.create(**self.request_kwargs(prompt))
        # A fresh client per call: pooled connections must not outlive the event loop
        async with self._new_client() as client:
            return await client.messages.create(**self.request_kwargs(prompt))

    async def generate(self, prompt: str) -> str:
        """Send a prompt and return the generated text.

        Raises:
            GenerationError: one of AuthenticationError, RateLimitError,
                ModelUnavailableError, UnknownGenerationError
        """
        try:
            response = await self._create(prompt)
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Error calling LLM: %s", e)
            raise classify_generation_error(e) from e

        text = self._extract_text(response)
        logger.debug("LLM response received", extra={"model": self.config.model, "chars": len(text)})
        return text
