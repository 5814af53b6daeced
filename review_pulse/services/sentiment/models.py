"""
Sentiment analysis data models and types.

Value types shared by the scorer, the normalizer, the inference chain and the
decision engine. Everything here is created and consumed within a single
analysis request, except cached results which live for the session.
"""

from __future__ import annotations

import math
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class SentimentLabel(str, Enum):
    """Canonical sentiment labels"""

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class SentimentSource(str, Enum):
    """Where a sentiment result came from"""

    REMOTE = "remote"
    LOCAL = "local"
    DEFAULT = "default"


class ActionCode(str, Enum):
    """Business actions driven by review sentiment"""

    OFFER_COUPON = "OFFER_COUPON"
    REQUEST_FEEDBACK = "REQUEST_FEEDBACK"
    ASK_REFERRAL = "ASK_REFERRAL"


def clamp_confidence(value: float) -> float:
    """Clamp a confidence into [0, 1]; NaN collapses to 0.5."""
    if math.isnan(value):
        return 0.5
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Review:
    """A review sampled from the review source"""

    text: str
    sentiment: Optional[int] = None  # ground truth +1 / 0 / -1, display only
    summary: str = ""


@dataclass(frozen=True)
class SentimentResult:
    """Canonical result of sentiment analysis for a single text"""

    label: SentimentLabel
    confidence: float
    source: SentimentSource
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @classmethod
    def default(cls, reason: str = "unparseable") -> SentimentResult:
        """The neutral result used when a response cannot be understood"""
        return cls(
            label=SentimentLabel.NEUTRAL,
            confidence=0.5,
            source=SentimentSource.DEFAULT,
            metadata={"reason": reason},
        )

    @property
    def display(self) -> str:
        """Human-readable label with percentage, e.g. ``POSITIVE (83.3%)``"""
        return f"{self.label.value} ({self.confidence * 100:.1f}%)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value,
            "confidence": self.confidence,
            "source": self.source.value,
            "display": self.display,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class ActionDecision:
    """Business action derived from a sentiment result"""

    action_code: ActionCode
    message: str
    color_hint: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_code": self.action_code.value,
            "message": self.message,
            "color_hint": self.color_hint,
            "score": self.score,
        }


@dataclass(frozen=True)
class ProviderAttempt:
    """A single call against one inference endpoint"""

    endpoint_index: int
    url: str
    started_at: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


@dataclass(frozen=True)
class AnalysisOutcome:
    """Everything handed to external collaborators after one analysis"""

    review: Review
    result: SentimentResult
    decision: ActionDecision
    analysis_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "analysis_id": self.analysis_id,
            "timestamp": self.timestamp.isoformat(),
            "review": {
                "text": self.review.text,
                "sentiment": self.review.sentiment,
                "summary": self.review.summary,
            },
            "sentiment": self.result.to_dict(),
            "decision": self.decision.to_dict(),
        }
