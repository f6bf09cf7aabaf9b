"""Shared test fixtures for report generation tests."""
import json
import pytest
import httpx
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from reporter.core.config import AppConfig, CacheConfig, ClaudeConfig, DatabaseConfig, NewsConfig
from reporter.core.types import FinancialRecord, NewsArticle
from reporter.services.llm_client import LLMClient
from reporter.services.news_fetcher import NewsFetcher
from reporter.services.report_cache import ReportCache
from reporter.services.financial_record_lookup import FinancialRecordLookup, InMemoryFinancialRecordStore

FIXED_TODAY = date(2025, 3, 7)
NEWS_URL = "https://news.example.test/"


@pytest.fixture
def fixed_today():
    return FIXED_TODAY


@pytest.fixture
def clock():
    return lambda: FIXED_TODAY


@pytest.fixture
def app_config():
    """AppConfig with explicit sub-configs so tests do not depend on the environment."""
    config = AppConfig()
    config.claude = ClaudeConfig(api_key="test-key", model="claude-test")
    config.news = NewsConfig(base_url=NEWS_URL, timeout_seconds=5.0)
    config.database = DatabaseConfig(url="sqlite://", table="salesforce_data")
    config.cache = CacheConfig(capacity=16)
    return config


@pytest.fixture
def persisted_record():
    return FinancialRecord(sales=100.0, profit=10.0, year=2022, source="db", company_name="Acme Corp")


@pytest.fixture
def financial_rows():
    return [
        {"company_id": "42", "company_name": "Acme Corp", "sales": "90", "profit": "9", "year": 2021},
        {"company_id": "42", "company_name": "Acme Corp", "sales": "100", "profit": "10", "year": 2022},
        {"company_id": "7", "company_name": "Globex", "sales": 5000000, "profit": -250000, "year": 2023},
    ]


@pytest.fixture
def memory_store(financial_rows):
    return InMemoryFinancialRecordStore(financial_rows)


@pytest.fixture
def lookup(memory_store):
    return FinancialRecordLookup(store=memory_store)


@pytest.fixture
def sample_articles():
    return [
        NewsArticle(title="Acme opens new plant", content="Capacity doubles in Ohio."),
        NewsArticle(title="Acme CEO interview", summary="Guidance reiterated."),
        NewsArticle(title="Analyst note"),
    ]


@pytest.fixture
def news_payload():
    """Default news service payload: object with an `articles` field."""
    return {"articles": [
        {"title": "Acme opens new plant", "content": "Capacity doubles in Ohio."},
        {"title": "Acme CEO interview", "summary": "Guidance reiterated."},
    ]}


def make_news_fetcher(payload=None, status_code=200, raw_body=None, calls=None):
    """NewsFetcher backed by httpx.MockTransport."""
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if raw_body is not None:
            return httpx.Response(status_code, content=raw_body)
        return httpx.Response(status_code, content=json.dumps(payload))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NewsFetcher(config=NewsConfig(base_url=NEWS_URL), client=client)


@pytest.fixture
def news_fetcher_factory():
    return make_news_fetcher


def make_llm_response(text):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


@pytest.fixture
def llm_response_factory():
    return make_llm_response


@pytest.fixture
def mock_anthropic():
    """Stand-in for AsyncAnthropic: only messages.create is used."""
    client = Mock()
    client.messages.create = AsyncMock(return_value=make_llm_response("**Summary:** Solid quarter."))
    return client


@pytest.fixture
def llm_client(app_config, mock_anthropic):
    return LLMClient(config=app_config.claude, client=mock_anthropic)


@pytest.fixture
def report_cache():
    return ReportCache(capacity=16)


def make_message_payload(text, model="claude-test"):
    """Minimal Anthropic Messages API response body."""
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }


@pytest.fixture
def anthropic_transport_factory():
    """Build http_client factories for AsyncAnthropic backed by httpx.MockTransport.

    Each request body is appended to `requests_seen`.
    """
    def _build(requests_seen, text="BODY"):
        def handler(request: httpx.Request) -> httpx.Response:
            requests_seen.append(json.loads(request.content))
            return httpx.Response(200, json=make_message_payload(text))

        return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _build
