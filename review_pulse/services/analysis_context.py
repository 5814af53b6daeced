"""
Session state for review analysis.

Everything that lives longer than a single analysis (loaded reviews, API
token, result cache, endpoint list) is held by one ``AnalysisContext``
created at startup and handed to the orchestrator. Tests build a fresh
context per case.
"""

import random
from typing import List, Optional, Sequence

from review_pulse.core.config import settings
from review_pulse.services.collaborators.review_source import (
    ReviewSource,
    ReviewSourceError,
)
from review_pulse.services.collaborators.token_store import TokenStore
from review_pulse.services.inference.providers import InferenceEndpoint, build_endpoints
from review_pulse.services.sentiment.cache import ResultCache
from review_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisContext:
    """Container for one analysis session"""

    def __init__(
        self,
        reviews: Optional[ReviewSource] = None,
        endpoints: Optional[Sequence[InferenceEndpoint]] = None,
        cache: Optional[ResultCache] = None,
        token_store: Optional[TokenStore] = None,
        token: Optional[str] = None,
        offline: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.reviews = reviews if reviews is not None else ReviewSource()
        self.endpoints: List[InferenceEndpoint] = list(endpoints or [])
        self.cache = cache if cache is not None else ResultCache()
        self.token_store = token_store
        self.token = token
        if self.token is None and token_store is not None:
            self.token = token_store.load()
        self.offline = offline
        self.rng = rng or random.Random()
        self.in_flight = False

    @classmethod
    def from_settings(cls) -> "AnalysisContext":
        """Build the session from configuration, loading reviews and token."""
        try:
            reviews = ReviewSource.from_tsv(settings.REVIEWS_PATH)
        except ReviewSourceError as e:
            logger.error("Review file unavailable", error=str(e))
            reviews = ReviewSource()

        context = cls(
            reviews=reviews,
            endpoints=build_endpoints(),
            cache=ResultCache(settings.CACHE_FINGERPRINT_LENGTH),
            token_store=TokenStore(settings.TOKEN_STORE_PATH),
            offline=settings.offline,
        )
        logger.info(
            "Analysis context ready",
            reviews=len(context.reviews),
            endpoints=len(context.endpoints),
            offline=context.offline,
            has_token=context.has_token,
        )
        return context

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @property
    def remote_enabled(self) -> bool:
        return not self.offline and bool(self.endpoints)

    def set_token(self, token: Optional[str]) -> Optional[str]:
        """Update the API token, persisting it when a store is configured."""
        token = (token or "").strip() or None
        self.token = token
        if self.token_store is not None:
            try:
                self.token_store.save(token)
            except OSError as e:
                logger.warning(
                    "Failed to persist token, keeping it for this session only",
                    path=str(self.token_store.path),
                    error=str(e),
                )
        return token

    def clear_token(self) -> None:
        self.token = None
        if self.token_store is not None:
            try:
                self.token_store.clear()
            except OSError as e:
                logger.warning(
                    "Failed to remove token file", path=str(self.token_store.path), error=str(e)
                )
