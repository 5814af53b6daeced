"""
Review analysis orchestrator.

Sequences one analysis: cache lookup, remote provider chain, lexical
fallback, cache population, business decision, and hand-off of the outcome
to listeners such as the spreadsheet logger. From the caller's point of
view an analysis never fails because inference failed; the worst case is an
offline-quality LOCAL result.
"""

from typing import Awaitable, Callable, List, Optional, Sequence

from review_pulse.services import metrics
from review_pulse.services.analysis_context import AnalysisContext
from review_pulse.services.decision_engine import decide_for_result
from review_pulse.services.inference.chain import ProviderChain
from review_pulse.services.inference.exceptions import AllProvidersExhausted
from review_pulse.services.inference.providers import RequestExecutor
from review_pulse.services.sentiment.lexical import LexicalScorer
from review_pulse.services.sentiment.models import (
    AnalysisOutcome,
    Review,
    SentimentResult,
    SentimentSource,
)
from review_pulse.utils.logger import add_analysis_context, get_logger

logger = get_logger(__name__)

OutcomeListener = Callable[[AnalysisOutcome], Awaitable[None]]


class AnalysisInProgressError(Exception):
    """Raised when an analysis is requested while another one is running."""

    pass


class Orchestrator:
    """
    Runs analyses against one ``AnalysisContext``.

    Only one analysis may be in flight per context; a concurrent request is
    refused with ``AnalysisInProgressError`` instead of being queued.
    """

    def __init__(
        self,
        context: AnalysisContext,
        chain: Optional[ProviderChain] = None,
        scorer: Optional[LexicalScorer] = None,
        listeners: Sequence[OutcomeListener] = (),
        executor: Optional[RequestExecutor] = None,
    ):
        self.context = context
        self.executor = executor or RequestExecutor()
        self.chain = chain or ProviderChain(context.endpoints, self.executor)
        self.scorer = scorer or LexicalScorer()
        self.listeners: List[OutcomeListener] = list(listeners)

    async def aclose(self) -> None:
        await self.executor.aclose()

    def add_listener(self, listener: OutcomeListener) -> None:
        self.listeners.append(listener)

    async def analyze_random(self) -> AnalysisOutcome:
        """
        Sample a review from the context and analyze it.

        Raises:
            AnalysisInProgressError: if another analysis is running
            NoReviewsAvailableError: if the context holds no reviews
        """
        self._ensure_idle()
        review = self.context.reviews.sample(self.context.rng)
        return await self.analyze(review.text, review=review)

    async def analyze(self, text: str, review: Optional[Review] = None) -> AnalysisOutcome:
        """
        Analyze one review text and decide the business action.

        Args:
            text: Review text
            review: The sampled review, when the text came from the review source

        Returns:
            AnalysisOutcome with the sentiment result and the action decision
        """
        self._ensure_idle()
        self.context.in_flight = True
        try:
            review = review or Review(text=text)
            result = await self._infer(text)
            decision = decide_for_result(result)
            metrics.DECISIONS_TOTAL.labels(action_code=decision.action_code.value).inc()

            outcome = AnalysisOutcome(review=review, result=result, decision=decision)
            logger.info(
                "Analysis complete",
                **add_analysis_context(outcome.analysis_id, len(text)),
                label=result.label.value,
                confidence=result.confidence,
                source=result.source.value,
                action_code=decision.action_code.value,
            )
        finally:
            self.context.in_flight = False

        await self._emit(outcome)
        return outcome

    async def _infer(self, text: str) -> SentimentResult:
        if not self.context.remote_enabled:
            return self._fallback(text, reason="offline")

        cache = self.context.cache
        fingerprint = cache.fingerprint(text)
        cached = cache.get(fingerprint)
        if cached is not None:
            logger.info("Using cached sentiment result", label=cached.label.value)
            return cached

        try:
            result = await self.chain.attempt(text, auth_token=self.context.token)
        except AllProvidersExhausted as e:
            logger.warning(
                "Remote inference unavailable, using lexical scorer",
                attempts=len(e.errors),
                last_error=str(e.last_error),
            )
            return self._fallback(text, reason="providers_exhausted")
        except Exception as e:
            logger.error(
                "Unexpected inference failure, using lexical scorer",
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True,
            )
            return self._fallback(text, reason="unexpected_error")

        if result.source == SentimentSource.REMOTE:
            cache.put(fingerprint, result)
        return result

    def _fallback(self, text: str, reason: str) -> SentimentResult:
        metrics.LEXICAL_FALLBACK_TOTAL.labels(reason=reason).inc()
        return self.scorer.score(text)

    async def _emit(self, outcome: AnalysisOutcome) -> None:
        for listener in self.listeners:
            try:
                await listener(outcome)
            except Exception as e:
                logger.warning(
                    "Outcome listener failed",
                    listener=getattr(listener, "__name__", type(listener).__name__),
                    analysis_id=outcome.analysis_id,
                    error_message=str(e),
                )

    def _ensure_idle(self) -> None:
        if self.context.in_flight:
            raise AnalysisInProgressError("An analysis is already running for this session")
