"""I/O collaborators of the analysis pipeline: reviews, token, log sink."""

from .review_source import NoReviewsAvailableError, ReviewSource, ReviewSourceError
from .sheet_logger import SheetLogger
from .token_store import TokenStore

__all__ = [
    "NoReviewsAvailableError",
    "ReviewSource",
    "ReviewSourceError",
    "SheetLogger",
    "TokenStore",
]
