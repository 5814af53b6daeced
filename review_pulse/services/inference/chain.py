"""
Provider chain for remote sentiment inference.

Walks an ordered list of endpoints (direct first, then relay variants) until
one of them answers. Every transition is recorded so the order of attempts,
backoffs and hand-overs for the last call can be inspected.

A 503 from an endpoint means the model is still loading: the chain waits the
warm-up backoff and then moves on to the *next* endpoint rather than retrying
the same one.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from review_pulse.core.config import settings
from review_pulse.services import metrics
from review_pulse.services.sentiment.models import (
    ProviderAttempt,
    SentimentResult,
)
from review_pulse.services.sentiment.normalizer import ResponseNormalizer
from review_pulse.utils.logger import add_endpoint_context, get_logger

from .exceptions import (
    AllProvidersExhausted,
    InferenceError,
    ModelWarming,
    UnparseableResponse,
)
from .providers import InferenceEndpoint, RequestExecutor

logger = get_logger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class ChainState(str, Enum):
    IDLE = "idle"
    TRYING = "trying"
    BACKOFF = "backoff"
    NEXT_PROVIDER = "next_provider"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ChainTransition:
    state: ChainState
    endpoint_index: Optional[int] = None
    detail: str = ""


class ProviderChain:
    """
    Ordered failover across inference endpoints.

    ``attempt`` returns the first usable result or raises
    ``AllProvidersExhausted``. The chain never falls back to local scoring on
    its own; that is the caller's decision.
    """

    def __init__(
        self,
        endpoints: Sequence[InferenceEndpoint],
        executor: RequestExecutor,
        normalizer: Optional[ResponseNormalizer] = None,
        timeout: Optional[float] = None,
        warmup_backoff: Optional[float] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.endpoints = list(endpoints)
        self.executor = executor
        self.normalizer = normalizer or ResponseNormalizer()
        self.timeout = settings.INFERENCE_TIMEOUT_SECONDS if timeout is None else timeout
        self.warmup_backoff = (
            settings.INFERENCE_WARMUP_BACKOFF_SECONDS
            if warmup_backoff is None
            else warmup_backoff
        )
        self._sleep = sleep
        self.trace: List[ChainTransition] = []

    def _record(self, state: ChainState, index: Optional[int] = None, detail: str = "") -> None:
        self.trace.append(ChainTransition(state, index, detail))

    async def attempt(self, text: str, auth_token: Optional[str] = None) -> SentimentResult:
        """
        Try each endpoint in order.

        Args:
            text: Review text to classify
            auth_token: Optional bearer token attached to every attempt

        Returns:
            SentimentResult from the first endpoint that answered

        Raises:
            AllProvidersExhausted: if no endpoint produced a response
        """
        self.trace = []
        self._record(ChainState.IDLE)
        errors: List[InferenceError] = []

        for index, endpoint in enumerate(self.endpoints):
            attempt = ProviderAttempt(endpoint_index=index, url=endpoint.url)
            self._record(ChainState.TRYING, index)
            metrics.INFERENCE_ATTEMPTS_TOTAL.labels(endpoint_kind=endpoint.kind.value).inc()

            try:
                body = await self.executor.execute(
                    attempt.url,
                    text,
                    deadline=time.monotonic() + self.timeout,
                    auth_token=auth_token,
                )
            except UnparseableResponse as e:
                # endpoint answered: no failover on an unreadable body
                self._observe(endpoint, attempt)
                self._record(ChainState.SUCCESS, index, "unparseable")
                logger.warning(
                    "Inference body could not be decoded, using default result",
                    **add_endpoint_context(index, endpoint.kind.value),
                    error_message=str(e),
                )
                return self._annotate(SentimentResult.default("unparseable_body"), endpoint, attempt)
            except ModelWarming as e:
                self._fail(endpoint, attempt, e, errors)
                self._record(ChainState.BACKOFF, index, f"{self.warmup_backoff}s")
                await self._sleep(self.warmup_backoff)
                self._advance(index)
                continue
            except InferenceError as e:
                self._fail(endpoint, attempt, e, errors)
                self._advance(index)
                continue

            self._observe(endpoint, attempt)
            result = self.normalizer.normalize(body)
            self._record(ChainState.SUCCESS, index)
            logger.info(
                "Inference succeeded",
                **add_endpoint_context(index, endpoint.kind.value),
                label=result.label.value,
                confidence=result.confidence,
                source=result.source.value,
                duration=round(attempt.elapsed(), 3),
            )
            return self._annotate(result, endpoint, attempt)

        self._record(ChainState.EXHAUSTED)
        logger.warning(
            "All inference providers failed",
            attempts=len(errors),
            last_error=str(errors[-1]) if errors else None,
        )
        raise AllProvidersExhausted(errors)

    def _advance(self, index: int) -> None:
        if index + 1 < len(self.endpoints):
            self._record(ChainState.NEXT_PROVIDER, index + 1)

    def _observe(self, endpoint: InferenceEndpoint, attempt: ProviderAttempt) -> None:
        metrics.INFERENCE_LATENCY_SECONDS.labels(endpoint_kind=endpoint.kind.value).observe(
            attempt.elapsed()
        )

    def _fail(
        self,
        endpoint: InferenceEndpoint,
        attempt: ProviderAttempt,
        error: InferenceError,
        errors: List[InferenceError],
    ) -> None:
        errors.append(error)
        self._observe(endpoint, attempt)
        metrics.INFERENCE_FAILURES_TOTAL.labels(
            endpoint_kind=endpoint.kind.value, error_type=type(error).__name__
        ).inc()
        logger.warning(
            "Inference attempt failed",
            **add_endpoint_context(attempt.endpoint_index, endpoint.kind.value),
            error_type=type(error).__name__,
            error_message=str(error),
            status=getattr(error, "status", None),
        )

    @staticmethod
    def _annotate(
        result: SentimentResult, endpoint: InferenceEndpoint, attempt: ProviderAttempt
    ) -> SentimentResult:
        metadata = dict(result.metadata)
        metadata.update(
            {
                "endpoint_index": attempt.endpoint_index,
                "endpoint_kind": endpoint.kind.value,
                "endpoint_url": attempt.url,
            }
        )
        return SentimentResult(
            label=result.label,
            confidence=result.confidence,
            source=result.source,
            metadata=metadata,
        )

    @property
    def states(self) -> List[ChainState]:
        """States visited during the last ``attempt`` call, in order."""
        return [t.state for t in self.trace]
