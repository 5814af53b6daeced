"""
Remote sentiment inference.

Endpoint definitions, the deadline-bounded request executor, and the
provider chain that fails over across direct and relay endpoints.
"""

from .chain import ChainState, ChainTransition, ProviderChain
from .exceptions import (
    AllProvidersExhausted,
    HttpError,
    InferenceError,
    InferenceTimeout,
    ModelWarming,
    NetworkFailure,
    UnparseableResponse,
)
from .providers import EndpointKind, InferenceEndpoint, RequestExecutor, build_endpoints

__all__ = [
    "AllProvidersExhausted",
    "ChainState",
    "ChainTransition",
    "EndpointKind",
    "HttpError",
    "InferenceEndpoint",
    "InferenceError",
    "InferenceTimeout",
    "ModelWarming",
    "NetworkFailure",
    "ProviderChain",
    "RequestExecutor",
    "UnparseableResponse",
    "build_endpoints",
]
