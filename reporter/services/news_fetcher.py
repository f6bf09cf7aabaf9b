import logging
from typing import Any, Dict, List, Optional

import httpx

from reporter.core.config import NewsConfig
from reporter.core.types import NewsArticle, NewsFetchResult

logger = logging.getLogger(__name__)


class NewsFetcher:
    """Best-effort news source. Any failure degrades to an empty article set."""

    def __init__(self, config: Optional[NewsConfig] = None, client: Optional[httpx.AsyncClient] = None):
        """Initialize fetcher.

        Args:
            config: Optional NewsConfig instance
            client: Optional httpx.AsyncClient (tests inject one backed by MockTransport)
        """
        self.config = config or NewsConfig()
        self._client = client

    @staticmethod
    def has_articles_field(payload: Dict[str, Any]) -> bool:
        """True when `articles` is set. Lists and objects count even when empty; null, false, 0 and "" do not."""
        articles = payload.get("articles")
        return isinstance(articles, (list, dict)) or bool(articles)

    @staticmethod
    def normalize(payload: Any) -> NewsFetchResult:
        """Normalize the three response shapes the news service is known to return.

        - bare array of articles
        - object with a set `articles` field
        - a single article object
        """
        has_financial_data: Optional[bool] = None
        if isinstance(payload, list):
            raw: List[Any] = payload
        elif isinstance(payload, dict) and NewsFetcher.has_articles_field(payload):
            articles = payload["articles"]
            if isinstance(articles, list):
                raw = articles
            elif isinstance(articles, dict):
                raw = [articles]
            else:
                raw = []
            flag = payload.get("hasFinancialData")
            has_financial_data = flag if isinstance(flag, bool) else None
        elif isinstance(payload, dict):
            raw = [payload]
        else:
            raw = []
        return NewsFetchResult(
            articles=[NewsArticle.from_dict(item) for item in raw],
            has_financial_data=has_financial_data,
        )

    async def _get(self, client: httpx.AsyncClient, company_id: str) -> httpx.Response:
        return await client.get(self.config.base_url, params={"id": company_id})

    async def fetch(self, company_id: str) -> NewsFetchResult:
        """Fetch articles for a company. Never raises."""
        try:
            if self._client is not None:
                response = await self._get(self._client, company_id)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout_seconds)) as client:
                    response = await self._get(client, company_id)

            if not response.is_success:
                raise httpx.HTTPStatusError(
                    f"API responded with status: {response.status_code}",
                    request=response.request,
                    response=response,
                )
            payload = response.json()
        except Exception as e:
            logger.warning("Error fetching news for %s: %s", company_id, e)
            return NewsFetchResult(error=str(e))

        result = self.normalize(payload)
        logger.debug("Fetched news", extra={"company_id": company_id, "article_count": len(result.articles)})
        return result
