"""Tab-separated review file loader."""

import csv
import random
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from review_pulse.services.sentiment.models import Review
from review_pulse.utils.logger import get_logger

logger = get_logger(__name__)


class ReviewSourceError(Exception):
    """Raised when the review file cannot be read."""

    pass


class NoReviewsAvailableError(ReviewSourceError):
    """Raised when sampling from an empty review source."""

    pass


def _parse_sentiment(value: Optional[str]) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def reviews_from_rows(rows: Iterable[Mapping[str, Optional[str]]]) -> List[Review]:
    """Build reviews from header-keyed rows, dropping rows without text."""
    reviews = []
    for row in rows:
        text = row.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        reviews.append(
            Review(
                text=text,
                sentiment=_parse_sentiment(row.get("sentiment")),
                summary=row.get("summary") or "",
            )
        )
    return reviews


class ReviewSource:
    """
    Already-materialized, indexable sequence of reviews.

    The pipeline only needs ``len()`` and random access; loading happens once.
    """

    def __init__(self, reviews: Sequence[Review] = ()):
        self._reviews: List[Review] = list(reviews)

    @classmethod
    def from_texts(cls, texts: Iterable[str]) -> "ReviewSource":
        return cls(reviews_from_rows({"text": t} for t in texts))

    @classmethod
    def from_tsv(cls, path: Union[str, Path]) -> "ReviewSource":
        """
        Load reviews from a TSV file with a header row.

        Columns: ``text`` (required), ``sentiment`` (+1/0/-1, optional),
        ``summary`` (optional).

        Raises:
            ReviewSourceError: if the file cannot be opened or has no ``text`` column
        """
        path = Path(path)
        try:
            with path.open(newline="", encoding="utf-8") as handle:
                reader = csv.DictReader(handle, delimiter="\t", quoting=csv.QUOTE_NONE)
                if not reader.fieldnames or "text" not in reader.fieldnames:
                    raise ReviewSourceError(f"TSV file {path} has no 'text' column")
                reviews = reviews_from_rows(reader)
        except OSError as e:
            raise ReviewSourceError(f"Failed to load TSV file {path}: {e}") from e
        except csv.Error as e:
            raise ReviewSourceError(f"Failed to parse TSV file {path}: {e}") from e

        logger.info("Loaded reviews", path=str(path), count=len(reviews))
        return cls(reviews)

    def __len__(self) -> int:
        return len(self._reviews)

    def __getitem__(self, index: int) -> Review:
        return self._reviews[index]

    def sample(self, rng: Optional[random.Random] = None) -> Review:
        """Pick one review uniformly at random."""
        if not self._reviews:
            raise NoReviewsAvailableError("No reviews available")
        rng = rng or random
        return self._reviews[rng.randrange(len(self._reviews))]
