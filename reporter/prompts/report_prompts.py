"""
Investment Report Prompts.

Two report variants share one data block (financial figures plus recent news)
and differ in the instructions that follow it. The recommendation values and
section headers are parsed by downstream consumers and must stay verbatim.
"""
import logging
from typing import Iterable, List, Tuple

from reporter.core.types import FinancialRecord, NewsArticle, VARIANT_BRIEF, VARIANT_DETAILED

logger = logging.getLogger(__name__)

# --- CLOSED RECOMMENDATION SET ---
RECOMMENDATION_OPTIONS: Tuple[str, ...] = (
    "Invest - Large Investment",
    "Invest - Medium Investment",
    "Invest - Small Investment",
    "Don't Invest",
    "Defer",
)
RECOMMENDATION_CHOICES = " / ".join(f'"{option}"' for option in RECOMMENDATION_OPTIONS)

DETAILED_SECTIONS: Tuple[str, ...] = (
    "Executive Summary",
    "Financial Analysis",
    "News Analysis",
    "Investment Recommendation",
)

NO_NEWS_LINE = "- No recent news available"
NO_DETAILS_TEXT = "No additional details"

# --- SHARED DATA BLOCK ---
REPORT_DATA_PROMPT = """You are an investment analyst. Generate a {depth} investment report for {company_name}.

Financial Data ({source}):
- Sales: ${sales}
- Profit: ${profit}
- Year: {year}

Recent News:
{news_section}"""

# --- BRIEF REPORT ---
BRIEF_REPORT_INSTRUCTIONS = """Provide a report in this EXACT format:

**News article title:** [Extract the main news title]

**Summary:** [2-3 sentences analyzing the financial data and news impact on the company's investment potential]

**Final Recommendation:** [Choose one: {choices}]

Use plain text formatting, no additional headers or markdown styling."""

# --- DETAILED REPORT ---
DETAILED_REPORT_INSTRUCTIONS = """Create a detailed report with these EXACT sections:

## Executive Summary
[Brief overview of the company's current position and outlook - 2-3 sentences]

## Financial Analysis
[Detailed analysis of the financial performance, profit margins, and financial health - include specific numbers and calculations]

## News Analysis
[Analysis of recent news and its potential impact on the company's future performance]

## Investment Recommendation
[Detailed reasoning for the recommendation including risks and opportunities]

**Final Recommendation:** [Choose one: {choices}]

Use proper markdown headers (##) for sections and provide comprehensive analysis in each section."""

VARIANT_PROMPTS = {
    VARIANT_BRIEF: ("brief", BRIEF_REPORT_INSTRUCTIONS),
    VARIANT_DETAILED: ("comprehensive", DETAILED_REPORT_INSTRUCTIONS),
}


def format_amount(value: float) -> str:
    """Thousands-separated amount with at most three decimals: 1234567.5 -> '1,234,567.5'."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


class PromptBuilder:
    """Renders the LLM prompt for a report variant."""

    @staticmethod
    def format_news_section(articles: Iterable[NewsArticle]) -> str:
        lines: List[str] = [
            f"- **{article.title}**: {article.body or NO_DETAILS_TEXT}"
            for article in articles
        ]
        return "\n".join(lines) if lines else NO_NEWS_LINE

    def build(
        self,
        company_name: str,
        financials: FinancialRecord,
        articles: Iterable[NewsArticle],
        variant: str,
    ) -> str:
        """Build the prompt string.

        Args:
            company_name: Company display name
            financials: Reconciled financial record
            articles: Articles to list under Recent News
            variant: VARIANT_BRIEF or VARIANT_DETAILED

        Raises:
            ValueError: If the variant is not supported
        """
        if variant not in VARIANT_PROMPTS:
            raise ValueError(f"Unsupported report variant: {variant}")
        depth, instructions = VARIANT_PROMPTS[variant]

        data_block = REPORT_DATA_PROMPT.format(
            depth=depth,
            company_name=company_name,
            source=financials.source.upper(),
            sales=format_amount(financials.sales),
            profit=format_amount(financials.profit),
            year=financials.year,
            news_section=self.format_news_section(articles),
        )
        prompt = f"{data_block}\n\n{instructions.format(choices=RECOMMENDATION_CHOICES)}"
        logger.debug("Built report prompt", extra={"variant": variant, "chars": len(prompt)})
        return prompt
