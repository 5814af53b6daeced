"""
Offline lexical sentiment scorer.

Keyword counting over product-review vocabulary. This is the answer of last
resort for the analysis pipeline, so ``score`` must never raise and must not
touch the network.
"""

import re
from typing import FrozenSet, Iterable, Pattern, Tuple

from review_pulse.utils.logger import get_logger

from .models import SentimentLabel, SentimentResult, SentimentSource

logger = get_logger(__name__)

POSITIVE_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "amazing",
        "awesome",
        "best",
        "comfortable",
        "delicious",
        "durable",
        "easy",
        "excellent",
        "fantastic",
        "fast",
        "favorite",
        "good",
        "great",
        "happy",
        "love",
        "loved",
        "nice",
        "perfect",
        "pleased",
        "recommend",
        "reliable",
        "satisfied",
        "sturdy",
        "superb",
        "wonderful",
        "worth",
    }
)

NEGATIVE_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "awful",
        "bad",
        "broke",
        "broken",
        "cheap",
        "damaged",
        "defective",
        "disappointed",
        "disappointing",
        "faulty",
        "flimsy",
        "hate",
        "horrible",
        "junk",
        "leaked",
        "poor",
        "refund",
        "return",
        "returned",
        "slow",
        "terrible",
        "useless",
        "waste",
        "worse",
        "worst",
    }
)

MAX_CONFIDENCE = 0.99


def _compile(words: Iterable[str]) -> Pattern[str]:
    alternatives = "|".join(re.escape(word) for word in sorted(words))
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


class LexicalScorer:
    """
    Deterministic keyword scorer.

    Counts whole-word, case-insensitive hits against a positive and a negative
    keyword table and converts the balance into a label and a confidence.
    """

    def __init__(
        self,
        positive_keywords: Iterable[str] = POSITIVE_KEYWORDS,
        negative_keywords: Iterable[str] = NEGATIVE_KEYWORDS,
    ):
        self.positive_keywords = frozenset(w.lower() for w in positive_keywords)
        self.negative_keywords = frozenset(w.lower() for w in negative_keywords)
        self._positive_pattern = _compile(self.positive_keywords)
        self._negative_pattern = _compile(self.negative_keywords)

    def count(self, text: str) -> Tuple[int, int]:
        """Return ``(positive_hits, negative_hits)`` for the text."""
        if not isinstance(text, str) or not text:
            return 0, 0
        positive = len(self._positive_pattern.findall(text))
        negative = len(self._negative_pattern.findall(text))
        return positive, negative

    def score(self, text: str) -> SentimentResult:
        """Score text into a LOCAL sentiment result."""
        p, n = self.count(text)

        if p > n:
            label = SentimentLabel.POSITIVE
            confidence = min(MAX_CONFIDENCE, 0.5 + p / (p + n + 1) * 0.5)
        elif n > p:
            label = SentimentLabel.NEGATIVE
            confidence = min(MAX_CONFIDENCE, 0.5 + n / (p + n + 1) * 0.5)
        else:
            label = SentimentLabel.NEUTRAL
            confidence = 0.5

        logger.debug(
            "Lexical score computed",
            positive_hits=p,
            negative_hits=n,
            label=label.value,
            confidence=confidence,
        )
        return SentimentResult(
            label=label,
            confidence=confidence,
            source=SentimentSource.LOCAL,
            metadata={"positive_hits": p, "negative_hits": n, "scorer": "lexical"},
        )
