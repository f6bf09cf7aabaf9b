import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from reporter.core.config import DatabaseConfig
from reporter.core.types import FinancialRecord, LookupResult, SOURCE_DB

logger = logging.getLogger(__name__)


class FinancialRecordStore(Protocol):
    """Read-only source of persisted financial rows."""

    def latest_record(self, company_id: str) -> Optional[Dict[str, Any]]:
        ...


class SQLFinancialRecordStore:
    """Reads the most recent financial row for a company from a SQL table."""

    QUERY_TEMPLATE: str = (
        "SELECT company_id, company_name, sales, profit, year "
        "FROM {table} WHERE company_id = :company_id "
        "ORDER BY year DESC LIMIT 1"
    )

    def __init__(self, config: Optional[DatabaseConfig] = None, engine: Optional[Engine] = None):
        """Initialize store.

        Args:
            config: Optional DatabaseConfig instance
            engine: Optional pre-built SQLAlchemy engine (tests)
        """
        self.config = config or DatabaseConfig()
        self.config.validate()
        self._engine: Optional[Engine] = engine
        self._query = text(self.QUERY_TEMPLATE.format(table=self.config.table))

    @property
    def engine(self) -> Engine:
        """Lazy-create the engine; nothing connects until the first query."""
        if self._engine is None:
            self._engine = create_engine(self.config.url)
        return self._engine

    def latest_record(self, company_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(self._query, {"company_id": company_id}).mappings().first()
        return dict(row) if row is not None else None


class InMemoryFinancialRecordStore:
    """List-backed store for demos and tests."""

    def __init__(self, rows: Optional[Iterable[Dict[str, Any]]] = None):
        self.rows: List[Dict[str, Any]] = list(rows or [])

    def latest_record(self, company_id: str) -> Optional[Dict[str, Any]]:
        matches = [r for r in self.rows if str(r.get("company_id")) == str(company_id)]
        if not matches:
            return None
        return max(matches, key=lambda r: int(r.get("year", 0)))


class FinancialRecordLookup:
    """Looks up the most recent persisted financial record for a company."""

    def __init__(self, store: Optional[FinancialRecordStore] = None, config: Optional[DatabaseConfig] = None):
        self._store = store
        self._config = config

    @property
    def store(self) -> FinancialRecordStore:
        """Lazy-load the SQL store when none was injected."""
        if self._store is None:
            self._store = SQLFinancialRecordStore(config=self._config)
        return self._store

    @staticmethod
    def to_record(row: Dict[str, Any]) -> FinancialRecord:
        """Convert a persisted row to a FinancialRecord. Raises on malformed rows."""
        return FinancialRecord(
            sales=float(str(row["sales"])),
            profit=float(str(row["profit"])),
            year=int(row["year"]),
            source=SOURCE_DB,
            company_name=str(row["company_name"]),
        )

    async def fetch_latest(self, company_id: str) -> LookupResult:
        """Fetch the latest record without raising.

        Returns:
            LookupResult with the record, with record=None when absent, or with
            error set when the store failed or returned a malformed row
        """
        try:
            row = await asyncio.to_thread(self.store.latest_record, company_id)
        except Exception as e:
            logger.warning("Financial record lookup failed for %s: %s", company_id, e)
            return LookupResult(error=f"lookup failed: {e}")

        if row is None:
            logger.info("No data found for company ID: %s", company_id)
            return LookupResult()

        try:
            record = self.to_record(row)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed financial row for %s: %s", company_id, e)
            return LookupResult(error=f"malformed row: {e}")

        logger.debug("Loaded financial record", extra={"company_id": company_id, "year": record.year})
        return LookupResult(record=record)
