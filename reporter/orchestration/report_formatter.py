from datetime import date
from typing import Optional

from reporter.core.types import (
    FinancialRecord,
    ReportOutcome,
    STATUS_CACHED,
    STATUS_DATA_NOT_FOUND,
    STATUS_GENERATED,
)

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def report_heading(company_name: str) -> str:
    return f"# {company_name} — Investment Report"


def format_report_date(day: date) -> str:
    """Short US-style date, e.g. 3/7/2025."""
    return f"{day.month}/{day.day}/{day.year}"


def render_report(company_name: str, body: str, financials: FinancialRecord, generated_on: date) -> str:
    """Wrap LLM text in the report envelope."""
    footer = (
        f"*Report generated on {format_report_date(generated_on)} using "
        f"{financials.source.upper()} financial data from {financials.year}*"
    )
    return f"{report_heading(company_name)}\n\n{body}\n\n---\n{footer}"


def render_data_not_found(company_name: str, company_id: str) -> str:
    return (
        f"{report_heading(company_name)}\n\n"
        f"**Error**: No financial data found for company ID: {company_id}\n\n"
        "Please ensure the company exists in our database and try again."
    )


def render_failure(company_name: str, message: Optional[str]) -> str:
    return (
        f"{report_heading(company_name)}\n\n"
        f"**Error**: Failed to generate report due to: {message or UNKNOWN_ERROR_MESSAGE}\n\n"
        "Please try again later or contact support if the issue persists."
    )


def render_outcome(outcome: ReportOutcome) -> str:
    """Turn a pipeline outcome into Markdown. Successful outcomes already hold the report."""
    if outcome.status in (STATUS_GENERATED, STATUS_CACHED) and outcome.report is not None:
        return outcome.report
    if outcome.status == STATUS_DATA_NOT_FOUND:
        return render_data_not_found(outcome.company_name, outcome.company_id)
    return render_failure(outcome.company_name, outcome.message)
