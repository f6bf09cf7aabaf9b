import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional

from reporter.core.config import AppConfig
from reporter.core.errors import DataNotFoundError, GenerationError
from reporter.core.types import (
    FinancialRecord,
    LookupResult,
    NewsArticle,
    NewsFetchResult,
    ReportOutcome,
    STATUS_CACHED,
    STATUS_DATA_NOT_FOUND,
    STATUS_GENERATED,
    STATUS_GENERATION_FAILED,
    STATUS_UNKNOWN_FAILURE,
    VARIANT_ALIASES,
    VARIANT_DETAILED,
)
from reporter.services.llm_client import LLMClient
from reporter.services.news_fetcher import NewsFetcher
from reporter.services.report_cache import ReportCache
from reporter.services.financial_record_lookup import FinancialRecordLookup
from reporter.calculators.financial_reconciler import FinancialReconciler
from reporter.prompts.report_prompts import PromptBuilder
from reporter.orchestration.report_formatter import render_outcome, render_failure, render_report

logger = logging.getLogger(__name__)


def normalize_variant(variant: Optional[str]) -> str:
    """Map a requested variant to 'brief' or 'detailed'. Unknown values fall back to 'detailed'."""
    key = (variant or "").strip().lower()
    if key not in VARIANT_ALIASES:
        logger.warning("Unknown report variant %r, using %s", variant, VARIANT_DETAILED)
        return VARIANT_DETAILED
    return VARIANT_ALIASES[key]


class ReportOrchestrator:
    """
    Generates investment reports from persisted financials, recent news and an LLM.

    Pipeline stages:
    1. Fetch: persisted record and news, concurrently
    2. Reconcile: news figures may override the persisted ones
    3. Cache check: identical (company, variant, article titles) requests reuse the report
    4. Prompt + generate: one LLM call, no retry
    5. Assemble and cache

    `run()` returns a tagged ReportOutcome; `generate_report()` renders it as
    Markdown and never raises.
    """

    def __init__(
        self,
        lookup: Optional[FinancialRecordLookup] = None,
        news_fetcher: Optional[NewsFetcher] = None,
        llm_client: Optional[LLMClient] = None,
        cache: Optional[ReportCache] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        config: Optional[AppConfig] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """Initialize orchestrator; every collaborator is optional and built from config.

        Args:
            lookup: Persisted financial record lookup
            news_fetcher: News source
            llm_client: LLM completion client
            cache: Report cache (bounded LRU from config by default)
            prompt_builder: Prompt renderer
            config: Optional AppConfig instance
            clock: Callable returning today's date (tests)
        """
        self.config = config or AppConfig.from_env()
        self.clock = clock or date.today
        self.lookup = lookup or FinancialRecordLookup(config=self.config.database)
        self.news_fetcher = news_fetcher or NewsFetcher(config=self.config.news)
        self.llm_client = llm_client or LLMClient(config=self.config.claude)
        self.cache = cache if cache is not None else ReportCache(config=self.config.cache)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.reconciler = FinancialReconciler(clock=self.clock)

    async def _fetch_sources(self, company_id: str):
        lookup_result, news_result = await asyncio.gather(
            self.lookup.fetch_latest(company_id),
            self.news_fetcher.fetch(company_id),
        )
        return lookup_result, news_result

    @staticmethod
    def _absorb_lookup(company_id: str, result: LookupResult) -> Optional[FinancialRecord]:
        # Lookup failures are treated exactly like missing data
        if not result.ok:
            logger.warning("Financial lookup failed, treating as not found", extra={"company_id": company_id, "error": result.error})
            return None
        return result.record

    @staticmethod
    def _absorb_news(company_id: str, result: NewsFetchResult) -> List[NewsArticle]:
        # News is enrichment only
        if not result.ok:
            logger.warning("News fetch failed, continuing without news", extra={"company_id": company_id, "error": result.error})
            return []
        return result.articles

    async def _run_pipeline(self, company_name: str, company_id: str, variant: str) -> ReportOutcome:
        logger.info("Generating %s report for %s (ID: %s)", variant, company_name, company_id)

        logger.info("[1/5] Fetching financial record and news...")
        lookup_result, news_result = await self._fetch_sources(company_id)
        persisted = self._absorb_lookup(company_id, lookup_result)
        articles = self._absorb_news(company_id, news_result)

        logger.info("[2/5] Reconciling financials...")
        financials = self.reconciler.reconcile(persisted, articles)
        if financials is None:
            raise DataNotFoundError(f"No financial data found for company ID: {company_id}")
        logger.info(
            "Using %s data",
            financials.source,
            extra={"sales": financials.sales, "profit": financials.profit, "year": financials.year},
        )

        logger.info("[3/5] Checking report cache...")
        cache_key = ReportCache.compute_key(company_id, variant, articles)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Returning cached report", extra={"cache_key": cache_key})
            return ReportOutcome(
                status=STATUS_CACHED,
                company_name=company_name,
                company_id=company_id,
                variant=variant,
                report=cached,
                financials=financials,
                cache_key=cache_key,
            )

        logger.info("[4/5] Calling LLM for report generation...")
        prompt = self.prompt_builder.build(company_name, financials, articles, variant)
        try:
            body = await self.llm_client.generate(prompt)
        except GenerationError as e:
            logger.warning("LLM generation failed (%s): %s", e.kind, e)
            return ReportOutcome(
                status=STATUS_GENERATION_FAILED,
                company_name=company_name,
                company_id=company_id,
                variant=variant,
                message=str(e),
                financials=financials,
                cache_key=cache_key,
            )

        logger.info("[5/5] Assembling report...")
        report = render_report(company_name, body, financials, self.clock())
        self.cache.put(cache_key, report)
        logger.info("Successfully generated %s report for %s", variant, company_name)
        return ReportOutcome(
            status=STATUS_GENERATED,
            company_name=company_name,
            company_id=company_id,
            variant=variant,
            report=report,
            financials=financials,
            cache_key=cache_key,
        )

    async def run(self, company_name: str, company_id: str, variant: str) -> ReportOutcome:
        """Run the pipeline and return a tagged outcome. Never raises."""
        normalized = VARIANT_DETAILED
        try:
            normalized = normalize_variant(variant)
            return await self._run_pipeline(company_name, company_id, normalized)
        except DataNotFoundError as e:
            logger.info("%s", e)
            return ReportOutcome(
                status=STATUS_DATA_NOT_FOUND,
                company_name=company_name,
                company_id=company_id,
                variant=normalized,
                message=str(e),
            )
        except Exception as e:
            logger.exception("Error generating report")
            return ReportOutcome(
                status=STATUS_UNKNOWN_FAILURE,
                company_name=company_name,
                company_id=company_id,
                variant=normalized,
                message=str(e) or None,
            )

    async def generate_report(self, company_name: str, company_id: str, variant: str) -> str:
        """Generate a Markdown report. Failures come back as report-shaped error text."""
        try:
            outcome = await self.run(company_name, company_id, variant)
            return render_outcome(outcome)
        except Exception as e:
            logger.exception("Error rendering report")
            return render_failure(company_name, str(e) or None)

    def generate_report_sync(self, company_name: str, company_id: str, variant: str) -> str:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.generate_report(company_name, company_id, variant))
