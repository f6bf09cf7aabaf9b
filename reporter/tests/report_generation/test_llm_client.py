"""Tests for LLMClient and error classification."""
import inspect
import httpx
import anthropic
import pytest
from types import SimpleNamespace
from anthropic.resources.messages import AsyncMessages

from reporter.core.config import ClaudeConfig
from reporter.core.errors import (
    AuthenticationError,
    GenerationError,
    ModelUnavailableError,
    RateLimitError,
    UnknownGenerationError,
)
from reporter.services.llm_client import LLMClient, classify_generation_error


def _status_error(cls, status_code, message):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(status_code, request=request)
    return cls(message, response=response, body=None)


class TestLLMClient:
    """Test suite for LLMClient with an injected client."""

    @pytest.mark.asyncio
    async def test_generate_returns_text(self, llm_client, mock_anthropic):
        """Test text is returned and the request carries model and prompt."""
        text = await llm_client.generate("prompt text")

        assert text == "**Summary:** Solid quarter."
        kwargs = mock_anthropic.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt text"}]

    @pytest.mark.asyncio
    async def test_generate_joins_text_blocks_only(self, llm_client, mock_anthropic):
        """Test non-text content blocks are skipped."""
        mock_anthropic.messages.create.return_value = SimpleNamespace(content=[
            SimpleNamespace(type="text", text="Part one. "),
            SimpleNamespace(type="tool_use", name="x"),
            SimpleNamespace(type="text", text="Part two."),
        ])
        assert await llm_client.generate("p") == "Part one. Part two."

    @pytest.mark.asyncio
    async def test_missing_api_key_is_authentication_error(self):
        """Test a missing key fails before any request."""
        client = LLMClient(config=ClaudeConfig(api_key=""))
        client.config.api_key = None
        with pytest.raises(AuthenticationError):
            await client.generate("p")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message, expected", [
        ("Resource exhausted: quota exceeded for project", RateLimitError),
        ("API_KEY_INVALID: API key not valid", AuthenticationError),
        ("requested model is overloaded", ModelUnavailableError),
        ("socket hang up", UnknownGenerationError),
    ])
    async def test_failures_are_classified(self, llm_client, mock_anthropic, message, expected):
        """Test SDK failures surface as classified GenerationErrors."""
        mock_anthropic.messages.create.side_effect = RuntimeError(message)

        with pytest.raises(expected) as exc_info:
            await llm_client.generate("p")

        assert isinstance(exc_info.value, GenerationError)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, llm_client, mock_anthropic):
        """Test a failed call is not retried."""
        mock_anthropic.messages.create.side_effect = RuntimeError("rate limit reached")
        with pytest.raises(RateLimitError):
            await llm_client.generate("p")
        assert mock_anthropic.messages.create.await_count == 1


class TestLLMClientWithSDK:
    """Test suite driving the real AsyncAnthropic client over httpx.MockTransport."""

    def test_request_kwargs_match_sdk_signature(self, app_config):
        """Test every keyword passed to messages.create is accepted by the installed SDK."""
        accepted = inspect.signature(AsyncMessages.create).parameters
        kwargs = LLMClient(config=app_config.claude).request_kwargs("p")

        assert set(kwargs) <= set(accepted)

    @pytest.mark.asyncio
    async def test_generate_through_sdk(self, app_config, anthropic_transport_factory):
        """Test a full Messages API round trip through the SDK."""
        requests_seen = []
        client = LLMClient(config=app_config.claude, http_client_factory=anthropic_transport_factory(requests_seen))

        text = await client.generate("prompt text")

        assert text == "BODY"
        body = requests_seen[0]
        assert body["model"] == "claude-test"
        assert body["temperature"] == app_config.claude.temperature
        assert body["messages"] == [{"role": "user", "content": "prompt text"}]

    @pytest.mark.asyncio
    async def test_new_sdk_client_per_call(self, app_config, anthropic_transport_factory):
        """Test each call builds its own HTTP client."""
        built = []
        base_factory = anthropic_transport_factory([])

        def factory():
            built.append(1)
            return base_factory()

        client = LLMClient(config=app_config.claude, http_client_factory=factory)
        await client.generate("one")
        await client.generate("two")

        assert len(built) == 2

    @pytest.mark.asyncio
    async def test_sdk_rate_limit_status_classified(self, app_config):
        """Test a 429 from the API surfaces as RateLimitError."""
        def handler(request):
            return httpx.Response(429, json={"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}})

        client = LLMClient(
            config=app_config.claude,
            http_client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        with pytest.raises(RateLimitError):
            await client.generate("p")


class TestClassifyGenerationError:
    """Structured SDK errors are classified by type before message text."""

    def test_sdk_rate_limit(self):
        """Test anthropic.RateLimitError maps to RateLimitError."""
        exc = _status_error(anthropic.RateLimitError, 429, "slow down")
        assert isinstance(classify_generation_error(exc), RateLimitError)

    def test_sdk_authentication(self):
        """Test anthropic.AuthenticationError maps to AuthenticationError."""
        exc = _status_error(anthropic.AuthenticationError, 401, "invalid x-api-key")
        assert isinstance(classify_generation_error(exc), AuthenticationError)

    def test_sdk_not_found_model_falls_back_to_message(self):
        """Test untyped SDK errors fall back to the message heuristic."""
        exc = _status_error(anthropic.NotFoundError, 404, "model: claude-nope")
        assert isinstance(classify_generation_error(exc), ModelUnavailableError)

    def test_already_classified_passes_through(self):
        """Test a GenerationError is returned unchanged."""
        err = RateLimitError("custom")
        assert classify_generation_error(err) is err

    def test_user_facing_messages(self):
        """Test default messages shown to users."""
        assert str(RateLimitError()) == "LLM API rate limit exceeded. Please try again later"
        assert str(UnknownGenerationError()) == "Failed to generate LLM response"
        assert "ANTHROPIC_API_KEY" in str(AuthenticationError())
