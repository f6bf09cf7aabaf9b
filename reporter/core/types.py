from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

# Provenance tags for financial figures
SOURCE_DB = "db"
SOURCE_API = "api"

# Report variants
VARIANT_BRIEF = "brief"
VARIANT_DETAILED = "detailed"
VARIANT_ALIASES: Dict[str, str] = {
    "brief": VARIANT_BRIEF,
    "high-level": VARIANT_BRIEF,
    "detailed": VARIANT_DETAILED,
}

# Report outcome statuses
STATUS_GENERATED = "generated"
STATUS_CACHED = "cached"
STATUS_DATA_NOT_FOUND = "data_not_found"
STATUS_GENERATION_FAILED = "generation_failed"
STATUS_UNKNOWN_FAILURE = "unknown_failure"


def _to_number(value: Any) -> Optional[float]:
    """Coerce a JSON figure to float; None for missing or non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


# --- Financial data ---
@dataclass
class FinancialRecord:
    """Canonical financial figures used to drive report generation."""
    sales: float
    profit: float
    year: int
    source: str
    company_name: str


@dataclass
class NewsArticle:
    """A news item. May opportunistically carry sales/profit figures."""
    title: str
    content: Optional[str] = None
    summary: Optional[str] = None
    date: Optional[str] = None
    sales: Optional[float] = None
    profit: Optional[float] = None

    @property
    def has_financials(self) -> bool:
        return self.sales is not None or self.profit is not None

    @property
    def body(self) -> Optional[str]:
        """Content, falling back to summary. Empty strings count as missing."""
        return self.content or self.summary or None

    @classmethod
    def from_dict(cls, data: Any) -> "NewsArticle":
        """Build an article from a loosely-shaped JSON object."""
        if not isinstance(data, dict):
            return cls(title=_to_text(data) or "")
        return cls(
            title=_to_text(data.get("title")) or "",
            content=_to_text(data.get("content")),
            summary=_to_text(data.get("summary")),
            date=_to_text(data.get("date")),
            sales=_to_number(data.get("sales")),
            profit=_to_number(data.get("profit")),
        )


# --- Collaborator results ---
@dataclass
class LookupResult:
    """Outcome of a persisted financial record lookup."""
    record: Optional[FinancialRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def found(self) -> bool:
        return self.record is not None


@dataclass
class NewsFetchResult:
    """Outcome of a news fetch. `articles` is always a list."""
    articles: List[NewsArticle] = field(default_factory=list)
    error: Optional[str] = None
    has_financial_data: Optional[bool] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# --- Report pipeline outcome ---
@dataclass
class ReportOutcome:
    """Tagged result of one report request, rendered to Markdown only at the boundary."""
    status: str
    company_name: str
    company_id: str
    variant: str
    report: Optional[str] = None
    message: Optional[str] = None
    financials: Optional[FinancialRecord] = None
    cache_key: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_GENERATED, STATUS_CACHED)
