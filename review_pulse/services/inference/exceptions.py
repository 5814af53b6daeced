"""
Custom exceptions for remote inference.

Provides a hierarchy of exceptions for the ways a single endpoint can fail,
plus the aggregate error raised once every endpoint in a chain has failed.
"""

from typing import List, Optional


class InferenceError(Exception):
    """Base exception for all inference errors."""

    pass


class NetworkFailure(InferenceError):
    """
    Transport-level failure.

    Connection refused, DNS failure, TLS errors and similar problems raised
    before an HTTP status is available.
    """

    pass


class InferenceTimeout(InferenceError):
    """The attempt did not finish before its deadline."""

    def __init__(self, timeout: float):
        super().__init__(f"Inference request timed out after {timeout}s")
        self.timeout = timeout


class HttpError(InferenceError):
    """Endpoint answered with a non-success HTTP status."""

    def __init__(self, status: int, message: str = ""):
        super().__init__(message or f"HTTP {status}")
        self.status = status


class ModelWarming(HttpError):
    """
    Endpoint answered 503 while the model is being loaded.

    Carries the service's own ``estimated_time`` hint when it sends one.
    """

    def __init__(self, estimated_time: Optional[float] = None):
        super().__init__(503, "Model is warming up")
        self.estimated_time = estimated_time


class UnparseableResponse(InferenceError):
    """
    Response body could not be decoded.

    Never propagates out of the chain; the normalizer's default result is used
    instead.
    """

    pass


class AllProvidersExhausted(InferenceError):
    """
    Every configured endpoint failed.

    ``last_error`` is the final failure observed; ``errors`` lists every
    failure in attempt order.
    """

    def __init__(self, errors: List[InferenceError]):
        self.errors = list(errors)
        self.last_error = self.errors[-1] if self.errors else None
        detail = str(self.last_error) if self.last_error else "no endpoints configured"
        super().__init__(f"All inference providers failed: {detail}")
