"""
Inference endpoints and the HTTP request executor.

Provides:
- InferenceEndpoint: a direct model URL or a relay-wrapped variant of it
- build_endpoints: the ordered endpoint list from settings
- RequestExecutor: one deadline-bounded POST against one endpoint
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from review_pulse.core.config import settings
from review_pulse.utils.logger import get_logger

from .exceptions import (
    HttpError,
    InferenceTimeout,
    ModelWarming,
    NetworkFailure,
    UnparseableResponse,
)

logger = get_logger(__name__)


class EndpointKind(str, Enum):
    DIRECT = "direct"
    RELAY = "relay"


@dataclass(frozen=True)
class InferenceEndpoint:
    """
    One place an inference request can be sent.

    Relay endpoints reach the same model through a URL-rewriting proxy; the
    target URL is percent-encoded into the ``{url}`` placeholder of the relay
    template.
    """

    target_url: str
    kind: EndpointKind = EndpointKind.DIRECT
    relay_template: Optional[str] = None

    @property
    def url(self) -> str:
        if self.kind == EndpointKind.RELAY and self.relay_template:
            return self.relay_template.replace("{url}", quote(self.target_url, safe=""))
        return self.target_url

    @classmethod
    def direct(cls, target_url: str) -> "InferenceEndpoint":
        return cls(target_url=target_url)

    @classmethod
    def relay(cls, target_url: str, relay_template: str) -> "InferenceEndpoint":
        if "{url}" not in relay_template:
            raise ValueError(f"Relay template lacks {{url}} placeholder: {relay_template}")
        return cls(
            target_url=target_url,
            kind=EndpointKind.RELAY,
            relay_template=relay_template,
        )


def build_endpoints(
    model_url: Optional[str] = None,
    relay_templates: Optional[Sequence[str]] = None,
) -> List[InferenceEndpoint]:
    """Direct endpoint first, then one relay variant per template."""
    if model_url is None:
        model_url = settings.INFERENCE_MODEL_URL
    if not model_url:
        return []
    if relay_templates is None:
        relay_templates = settings.INFERENCE_RELAY_TEMPLATES
    endpoints = [InferenceEndpoint.direct(model_url)]
    endpoints.extend(InferenceEndpoint.relay(model_url, t) for t in relay_templates)
    return endpoints


class RequestExecutor:
    """
    Sends a single inference request and maps every failure to an
    ``InferenceError``.

    The request races an explicit deadline. When the deadline wins the caller
    gets ``InferenceTimeout``; the underlying transport is not guaranteed to
    have stopped.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Create HTTP client when entering async context."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.INFERENCE_TIMEOUT_SECONDS)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.INFERENCE_TIMEOUT_SECONDS)
            self._owns_client = True
        return self._client

    @staticmethod
    def build_headers(auth_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        return headers

    async def execute(
        self,
        url: str,
        text: str,
        deadline: float,
        auth_token: Optional[str] = None,
    ) -> Any:
        """
        POST ``{"inputs": text}`` to ``url`` and return the decoded JSON body.

        Args:
            url: Endpoint URL (already relay-wrapped if needed)
            text: Review text to classify
            deadline: Absolute ``time.monotonic()`` value the call must finish by
            auth_token: Optional bearer token

        Raises:
            InferenceTimeout, NetworkFailure, ModelWarming, HttpError,
            UnparseableResponse
        """
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise InferenceTimeout(0.0)

        try:
            response = await asyncio.wait_for(
                self.client.post(
                    url,
                    json={"inputs": text},
                    headers=self.build_headers(auth_token),
                ),
                timeout=remaining,
            )
        except asyncio.TimeoutError:
            raise InferenceTimeout(round(remaining, 3))
        except httpx.TimeoutException:
            raise InferenceTimeout(round(remaining, 3))
        except httpx.HTTPError as e:
            raise NetworkFailure(f"Network error: {e}") from e
        except httpx.InvalidURL as e:
            raise NetworkFailure(f"Invalid URL: {e}") from e

        status = response.status_code
        if status == 503:
            raise ModelWarming(self._estimated_time(response))
        if not 200 <= status < 300:
            raise HttpError(status, f"HTTP {status}: {response.text[:200]}")

        try:
            return response.json()
        except ValueError as e:
            raise UnparseableResponse(f"Response is not JSON: {response.text[:200]}") from e

    @staticmethod
    def _estimated_time(response: httpx.Response) -> Optional[float]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            value = body.get("estimated_time")
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
        return None
