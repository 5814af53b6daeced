"""
Response normalization for remote inference services.

Inference endpoints answer with several shapes depending on the model and
the relay in front of it. The normalizer first classifies the payload into a
``ResponseShape`` and then converts it into a canonical ``SentimentResult``.
Anything it does not recognize becomes the DEFAULT neutral result; it never
raises.
"""

import math
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, List, Optional

from review_pulse.utils.logger import get_logger

from .models import SentimentLabel, SentimentResult, SentimentSource, clamp_confidence

logger = get_logger(__name__)

_KNOWN_LABELS = {
    SentimentLabel.POSITIVE.value: SentimentLabel.POSITIVE,
    SentimentLabel.NEGATIVE.value: SentimentLabel.NEGATIVE,
}


class ResponseShape(str, Enum):
    """Payload shapes observed from inference endpoints"""

    NESTED_RECORDS = "nested_records"  # [[{"label": ..., "score": ...}, ...]]
    FLAT_RECORDS = "flat_records"  # [{"label": ..., "score": ...}, ...]
    SINGLE_RECORD = "single_record"  # {"label": ..., "score": ...}
    BARE_NUMBER = "bare_number"  # 0 or 1
    UNKNOWN = "unknown"


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_record(value: Any) -> bool:
    return isinstance(value, Mapping) and "label" in value


def _is_record_list(value: Any) -> bool:
    return (
        isinstance(value, Sequence)
        and not isinstance(value, (str, bytes))
        and len(value) > 0
        and all(_is_record(item) for item in value)
    )


def detect_shape(raw: Any) -> ResponseShape:
    """Classify a decoded response body."""
    if _is_number(raw) and raw in (0, 1):
        return ResponseShape.BARE_NUMBER
    if _is_record(raw):
        return ResponseShape.SINGLE_RECORD
    if _is_record_list(raw):
        return ResponseShape.FLAT_RECORDS
    if (
        isinstance(raw, Sequence)
        and not isinstance(raw, (str, bytes))
        and len(raw) > 0
        and _is_record_list(raw[0])
    ):
        return ResponseShape.NESTED_RECORDS
    return ResponseShape.UNKNOWN


class ResponseNormalizer:
    """Turns any inference response into a canonical sentiment result."""

    def normalize(self, raw: Any) -> SentimentResult:
        try:
            shape = detect_shape(raw)
        except Exception as exc:  # exotic containers with broken __len__ etc.
            logger.warning("Could not classify response", error=str(exc))
            return SentimentResult.default("unclassifiable")

        if shape == ResponseShape.NESTED_RECORDS:
            result = self._from_records(raw[0], shape)
        elif shape == ResponseShape.FLAT_RECORDS:
            result = self._from_records(raw, shape)
        elif shape == ResponseShape.SINGLE_RECORD:
            result = self._from_records([raw], shape)
        elif shape == ResponseShape.BARE_NUMBER:
            result = self._from_number(raw)
        else:
            result = None

        if result is None:
            logger.info(
                "Unrecognized inference response, using default",
                response_type=type(raw).__name__,
            )
            return SentimentResult.default()
        return result

    def _from_records(
        self, records: List[Mapping], shape: ResponseShape
    ) -> SentimentResult:
        best = max(records, key=self._record_score)
        label = self._parse_label(best.get("label"))
        score = best.get("score")
        confidence = clamp_confidence(score) if _is_number(score) else 0.5
        return SentimentResult(
            label=label,
            confidence=confidence,
            source=SentimentSource.REMOTE,
            metadata={"shape": shape.value, "raw_label": str(best.get("label"))},
        )

    def _from_number(self, value: float) -> SentimentResult:
        label = SentimentLabel.POSITIVE if value == 1 else SentimentLabel.NEGATIVE
        return SentimentResult(
            label=label,
            confidence=clamp_confidence(abs(value - 0.5) * 2),
            source=SentimentSource.REMOTE,
            metadata={"shape": ResponseShape.BARE_NUMBER.value, "raw_value": value},
        )

    @staticmethod
    def _record_score(record: Mapping) -> float:
        score = record.get("score")
        return float(score) if _is_number(score) else 0.5

    @staticmethod
    def _parse_label(label: Any) -> SentimentLabel:
        if not isinstance(label, str):
            return SentimentLabel.NEUTRAL
        return _KNOWN_LABELS.get(label.strip().upper(), SentimentLabel.NEUTRAL)
