"""Request and response models for the analysis API."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from review_pulse.services.sentiment.models import AnalysisOutcome


class AnalyzeTextRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Review text to analyze")


class TokenUpdateRequest(BaseModel):
    token: str = Field("", description="Inference API token; blank clears it")


class TokenStatus(BaseModel):
    configured: bool


class ReviewPayload(BaseModel):
    text: str
    sentiment: Optional[int] = None
    summary: str = ""


class SentimentPayload(BaseModel):
    label: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: str
    display: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DecisionPayload(BaseModel):
    action_code: str
    message: str
    color_hint: str
    score: float


class AnalysisResponse(BaseModel):
    analysis_id: str
    timestamp: str
    review: ReviewPayload
    sentiment: SentimentPayload
    decision: DecisionPayload

    @classmethod
    def from_outcome(cls, outcome: AnalysisOutcome) -> "AnalysisResponse":
        return cls.model_validate(outcome.to_dict())


class ReviewCountResponse(BaseModel):
    count: int
