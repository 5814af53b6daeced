"""
Spreadsheet logging sink for analysis outcomes.

Each analysis becomes one row posted to a spreadsheet web hook:
``ts_iso``, ``review``, ``sentiment``, ``meta`` (a JSON string) and
``action_taken``. Delivery is fire-and-forget: failures are logged and
counted, never raised into the analysis pipeline.
"""

import json
import platform
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from review_pulse.core.config import settings
from review_pulse.services import metrics
from review_pulse.services.sentiment.models import AnalysisOutcome, SentimentSource
from review_pulse.utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 100

_INFERENCE_TYPES = {
    SentimentSource.REMOTE: "remote_inference_api",
    SentimentSource.LOCAL: "local_lexical",
    SentimentSource.DEFAULT: "default_unparseable",
}


def build_meta(outcome: AnalysisOutcome) -> Dict[str, Any]:
    review = outcome.review.text
    preview = review[:PREVIEW_LENGTH] + ("..." if len(review) > PREVIEW_LENGTH else "")
    return {
        "model": settings.INFERENCE_MODEL_NAME,
        "inference_type": _INFERENCE_TYPES[outcome.result.source],
        "endpoint_url": outcome.result.metadata.get("endpoint_url"),
        "timestamp": outcome.timestamp.isoformat(),
        "analysis_id": outcome.analysis_id,
        "review_length": len(review),
        "review_preview": preview,
        "client_info": {
            "app": settings.APP_NAME,
            "environment": settings.APP_ENV,
            "python": platform.python_version(),
            "platform": platform.system(),
        },
    }


def build_row(outcome: AnalysisOutcome) -> Dict[str, Any]:
    """Build the row payload the spreadsheet web hook expects."""
    return {
        "ts_iso": datetime.now(timezone.utc).isoformat(),
        "review": outcome.review.text,
        "sentiment": outcome.result.display,
        "meta": json.dumps(build_meta(outcome)),
        "action_taken": outcome.decision.action_code.value,
    }


class SheetLogger:
    """Posts analysis rows to a spreadsheet web hook."""

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url if url is not None else settings.SHEET_LOGGER_URL
        self.timeout = timeout or settings.SHEET_LOGGER_TIMEOUT_SECONDS
        self._client = client
        self._owns_client = client is None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __call__(self, outcome: AnalysisOutcome) -> None:
        await self.log(outcome)

    async def log(self, outcome: AnalysisOutcome) -> bool:
        """Send one row; returns whether the sink accepted it."""
        if not self.enabled:
            return False

        row = build_row(outcome)
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True

        try:
            response = await self._client.post(self.url, json=row, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            metrics.SHEET_LOG_FAILURES_TOTAL.inc()
            logger.warning(
                "Failed to log analysis to spreadsheet",
                analysis_id=outcome.analysis_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

        logger.info(
            "Analysis logged to spreadsheet",
            analysis_id=outcome.analysis_id,
            action_taken=row["action_taken"],
        )
        return True
