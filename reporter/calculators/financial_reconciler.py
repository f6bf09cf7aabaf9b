import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional

from reporter.core.types import FinancialRecord, NewsArticle, SOURCE_API

logger = logging.getLogger(__name__)


class FinancialReconciler:
    """Merges a persisted financial record with figures reported in the news.

    Precedence: the first article carrying sales or profit defines a candidate.
    The candidate overrides sales, profit, year and source only when both of its
    figures are non-zero. A zero figure counts as absent, so a company reporting
    exactly zero profit in the news never overrides the persisted record.
    The company name always comes from the persisted record.
    """

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        self._clock = clock or date.today

    @property
    def current_year(self) -> int:
        return self._clock().year

    def extract_financials_from_news(self, articles: Iterable[NewsArticle]) -> Optional[Dict[str, Any]]:
        """Return the first article's figures as a partial record, or None."""
        for article in articles:
            if article.has_financials:
                return {
                    "sales": article.sales or 0,
                    "profit": article.profit or 0,
                    "year": self.current_year,
                    "source": SOURCE_API,
                }
        return None

    def reconcile(self, persisted: Optional[FinancialRecord], articles: Iterable[NewsArticle]) -> Optional[FinancialRecord]:
        """Pick the financial record to report on. None when nothing is persisted."""
        if persisted is None:
            return None

        candidate = self.extract_financials_from_news(articles)
        if candidate and candidate["sales"] and candidate["profit"]:
            logger.debug("News figures override persisted record", extra={"company_name": persisted.company_name})
            return replace(persisted, **candidate)
        return persisted
