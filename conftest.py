"""
Shared fixtures for the analysis pipeline tests.
"""

import os
import random
import sys
from typing import Any, Callable, Dict, List, Optional

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from review_pulse.services.analysis_context import AnalysisContext  # noqa: E402
from review_pulse.services.collaborators.review_source import ReviewSource  # noqa: E402
from review_pulse.services.inference.providers import InferenceEndpoint  # noqa: E402
from review_pulse.services.sentiment.cache import ResultCache  # noqa: E402

MODEL_URL = "https://inference.test/models/sst2"
RELAY_TEMPLATES = ["https://relay-one.test/?{url}", "https://relay-two.test/raw?url={url}"]


class ScriptedExecutor:
    """
    Stand-in for RequestExecutor that replays scripted outcomes.

    ``script`` holds one entry per expected call: either a decoded body to
    return or an exception instance to raise.
    """

    def __init__(self, script: Optional[List[Any]] = None):
        self.script = list(script or [])
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, url: str, text: str, deadline: float, auth_token: Optional[str] = None):
        self.calls.append(
            {"url": url, "text": text, "deadline": deadline, "auth_token": auth_token}
        )
        if not self.script:
            raise AssertionError(f"Unexpected inference call to {url}")
        outcome = self.script.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        return None


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def endpoints() -> List[InferenceEndpoint]:
    return [InferenceEndpoint.direct(MODEL_URL)] + [
        InferenceEndpoint.relay(MODEL_URL, template) for template in RELAY_TEMPLATES
    ]


@pytest.fixture
def make_executor() -> Callable[..., ScriptedExecutor]:
    def _make(*script: Any) -> ScriptedExecutor:
        return ScriptedExecutor(list(script))

    return _make


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_context(endpoints) -> Callable[..., AnalysisContext]:
    """Fresh session per test; nothing is shared between cases."""

    def _make(
        texts: Optional[List[str]] = None,
        offline: bool = False,
        token: Optional[str] = None,
        with_endpoints: bool = True,
    ) -> AnalysisContext:
        return AnalysisContext(
            reviews=ReviewSource.from_texts(texts or []),
            endpoints=endpoints if with_endpoints else [],
            cache=ResultCache(100),
            token=token,
            offline=offline,
            rng=random.Random(7),
        )

    return _make
