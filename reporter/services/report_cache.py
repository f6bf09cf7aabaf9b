import logging
from collections import OrderedDict
from typing import Dict, Iterable, Optional

from reporter.core.config import CacheConfig
from reporter.core.types import NewsArticle

logger = logging.getLogger(__name__)


class ReportCache:
    """LRU cache of rendered reports keyed by request fingerprint.

    `capacity=None` keeps every entry for the lifetime of the instance.
    Not locked: identical concurrent requests may both miss and both write the
    same value.
    """

    KEY_SEPARATOR: str = "|"

    def __init__(self, capacity: Optional[int] = None, config: Optional[CacheConfig] = None):
        if capacity is None and config is not None:
            capacity = config.capacity
        if capacity is not None and capacity < 1:
            raise ValueError("capacity must be >= 1 or None")
        self.capacity = capacity
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @classmethod
    def compute_key(cls, company_id: str, variant: str, articles: Iterable[NewsArticle]) -> str:
        """Fingerprint of (company, variant, article titles). Title order does not matter."""
        titles = sorted(article.title for article in articles)
        return f"{company_id}-{variant}-{cls.KEY_SEPARATOR.join(titles)}"

    def get(self, key: str) -> Optional[str]:
        report = self._entries.get(key)
        if report is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return report

    def put(self, key: str, report: str) -> None:
        self._entries[key] = report
        self._entries.move_to_end(key)
        if self.capacity is not None:
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug("Evicted cached report", extra={"cache_key": evicted})

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cleared report cache")

    def stats(self) -> Dict[str, Optional[int]]:
        return {
            "size": len(self._entries),
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
