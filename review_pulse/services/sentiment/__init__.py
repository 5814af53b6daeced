"""
Sentiment primitives for review analysis.

Canonical result types, the offline lexical scorer, the response normalizer
for remote inference payloads, and the session result cache.
"""

from .cache import ResultCache
from .lexical import LexicalScorer
from .models import (
    ActionCode,
    ActionDecision,
    AnalysisOutcome,
    ProviderAttempt,
    Review,
    SentimentLabel,
    SentimentResult,
    SentimentSource,
)
from .normalizer import ResponseNormalizer, ResponseShape, detect_shape

__all__ = [
    "ActionCode",
    "ActionDecision",
    "AnalysisOutcome",
    "LexicalScorer",
    "ProviderAttempt",
    "ResponseNormalizer",
    "ResponseShape",
    "ResultCache",
    "Review",
    "SentimentLabel",
    "SentimentResult",
    "SentimentSource",
    "detect_shape",
]
