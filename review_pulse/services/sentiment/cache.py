"""Session-scoped cache of remote sentiment results."""

from __future__ import annotations

from typing import Dict, Optional

from review_pulse.core.config import settings
from review_pulse.services import metrics
from review_pulse.utils.logger import get_logger

from .models import SentimentResult

logger = get_logger(__name__)


class ResultCache:
    """
    In-memory map from a review fingerprint to its last remote result.

    The fingerprint is the leading ``fingerprint_length`` characters of the
    review text, so two reviews with the same prefix share one entry. There is
    no TTL and no eviction; the cache lives as long as its session.
    """

    def __init__(self, fingerprint_length: Optional[int] = None, name: str = "sentiment_result_cache"):
        self.fingerprint_length = fingerprint_length or settings.CACHE_FINGERPRINT_LENGTH
        self.name = name
        self._entries: Dict[str, SentimentResult] = {}

    def fingerprint(self, text: str) -> str:
        return text[: self.fingerprint_length]

    def get(self, fingerprint: str) -> Optional[SentimentResult]:
        result = self._entries.get(fingerprint)
        outcome = "hit" if result is not None else "miss"
        metrics.CACHE_ACCESS_TOTAL.labels(cache_name=self.name, result=outcome).inc()
        logger.debug("Cache lookup", cache=self.name, result=outcome)
        return result

    def put(self, fingerprint: str, result: SentimentResult) -> None:
        self._entries[fingerprint] = result
        logger.debug("Cache store", cache=self.name, size=len(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._entries
