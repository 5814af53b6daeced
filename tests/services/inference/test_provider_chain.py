"""
Tests for provider chain failover.

The chain is driven by a scripted executor so every attempt, backoff and
hand-over can be asserted without network access.
"""

import time

import httpx
import pytest

from review_pulse.services.inference.chain import ChainState, ProviderChain
from review_pulse.services.inference.exceptions import (
    AllProvidersExhausted,
    HttpError,
    InferenceTimeout,
    ModelWarming,
    NetworkFailure,
    UnparseableResponse,
)
from review_pulse.services.inference.providers import InferenceEndpoint, RequestExecutor
from review_pulse.services.sentiment.models import SentimentLabel, SentimentSource

pytestmark = pytest.mark.asyncio

POSITIVE_BODY = [[{"label": "POSITIVE", "score": 0.97}, {"label": "NEGATIVE", "score": 0.03}]]
NEGATIVE_BODY = [[{"label": "NEGATIVE", "score": 0.88}, {"label": "POSITIVE", "score": 0.12}]]


def _chain(endpoints, executor, sleep, timeout=15.0, warmup_backoff=3.0):
    return ProviderChain(
        endpoints,
        executor,
        timeout=timeout,
        warmup_backoff=warmup_backoff,
        sleep=sleep,
    )


async def test_direct_endpoint_success(endpoints, make_executor, sleep_recorder):
    executor = make_executor(POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    result = await chain.attempt("Great kettle")

    assert result.label == SentimentLabel.POSITIVE
    assert result.confidence == pytest.approx(0.97)
    assert result.source == SentimentSource.REMOTE
    assert result.metadata["endpoint_index"] == 0
    assert result.metadata["endpoint_kind"] == "direct"
    assert [c["url"] for c in executor.calls] == [endpoints[0].url]
    assert chain.states == [ChainState.IDLE, ChainState.TRYING, ChainState.SUCCESS]
    assert sleep_recorder.delays == []


async def test_token_is_forwarded(endpoints, make_executor, sleep_recorder):
    executor = make_executor(POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    await chain.attempt("Great kettle", auth_token="hf_secret")

    assert executor.calls[0]["auth_token"] == "hf_secret"


async def test_no_token_means_no_auth(endpoints, make_executor, sleep_recorder):
    executor = make_executor(POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    await chain.attempt("Great kettle")

    assert executor.calls[0]["auth_token"] is None


async def test_each_attempt_gets_its_own_deadline(endpoints, make_executor, sleep_recorder):
    executor = make_executor(HttpError(500), POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder, timeout=15.0)

    before = time.monotonic()
    await chain.attempt("Great kettle")
    after = time.monotonic()

    for call in executor.calls:
        assert before + 15.0 <= call["deadline"] <= after + 15.0


async def test_server_error_advances_to_relay(endpoints, make_executor, sleep_recorder):
    executor = make_executor(HttpError(500), NEGATIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    result = await chain.attempt("Broken lid")

    assert result.label == SentimentLabel.NEGATIVE
    assert result.metadata["endpoint_index"] == 1
    assert result.metadata["endpoint_kind"] == "relay"
    assert [c["url"] for c in executor.calls] == [endpoints[0].url, endpoints[1].url]
    assert sleep_recorder.delays == []
    assert chain.states == [
        ChainState.IDLE,
        ChainState.TRYING,
        ChainState.NEXT_PROVIDER,
        ChainState.TRYING,
        ChainState.SUCCESS,
    ]


@pytest.mark.parametrize(
    "error",
    [NetworkFailure("connection refused"), InferenceTimeout(15.0), HttpError(404)],
)
async def test_transport_failures_advance(endpoints, make_executor, sleep_recorder, error):
    executor = make_executor(error, POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    result = await chain.attempt("Great kettle")

    assert result.source == SentimentSource.REMOTE
    assert len(executor.calls) == 2


async def test_model_warming_backs_off_then_advances_to_next_provider(
    endpoints, make_executor, sleep_recorder
):
    # Canonical choice for 503: wait once, then move on. The warming endpoint
    # is NOT retried in place.
    executor = make_executor(ModelWarming(estimated_time=20.0), POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder, warmup_backoff=3.0)

    result = await chain.attempt("Great kettle")

    assert result.label == SentimentLabel.POSITIVE
    assert sleep_recorder.delays == [3.0]
    assert [c["url"] for c in executor.calls] == [endpoints[0].url, endpoints[1].url]
    assert chain.states == [
        ChainState.IDLE,
        ChainState.TRYING,
        ChainState.BACKOFF,
        ChainState.NEXT_PROVIDER,
        ChainState.TRYING,
        ChainState.SUCCESS,
    ]


async def test_all_providers_fail(endpoints, make_executor, sleep_recorder):
    executor = make_executor(HttpError(500), ModelWarming(), NetworkFailure("dns"))
    chain = _chain(endpoints, executor, sleep_recorder)

    with pytest.raises(AllProvidersExhausted) as excinfo:
        await chain.attempt("Great kettle")

    assert len(excinfo.value.errors) == 3
    assert isinstance(excinfo.value.last_error, NetworkFailure)
    assert len(executor.calls) == 3
    assert sleep_recorder.delays == [3.0]
    assert chain.states[-1] == ChainState.EXHAUSTED
    assert ChainState.SUCCESS not in chain.states


async def test_warming_on_last_endpoint_still_backs_off(endpoints, make_executor, sleep_recorder):
    executor = make_executor(HttpError(500), HttpError(502), ModelWarming())
    chain = _chain(endpoints, executor, sleep_recorder)

    with pytest.raises(AllProvidersExhausted) as excinfo:
        await chain.attempt("Great kettle")

    assert isinstance(excinfo.value.last_error, ModelWarming)
    assert sleep_recorder.delays == [3.0]


async def test_unparseable_body_returns_default_without_failover(
    endpoints, make_executor, sleep_recorder
):
    executor = make_executor(UnparseableResponse("not json"))
    chain = _chain(endpoints, executor, sleep_recorder)

    result = await chain.attempt("Great kettle")

    assert result.source == SentimentSource.DEFAULT
    assert result.label == SentimentLabel.NEUTRAL
    assert result.confidence == 0.5
    assert len(executor.calls) == 1


async def test_unrecognized_json_is_normalized_to_default(endpoints, make_executor, sleep_recorder):
    executor = make_executor({"error": "Internal"})
    chain = _chain(endpoints, executor, sleep_recorder)

    result = await chain.attempt("Great kettle")

    assert result.source == SentimentSource.DEFAULT
    assert len(executor.calls) == 1


async def test_empty_chain_is_exhausted_immediately(make_executor, sleep_recorder):
    executor = make_executor()
    chain = _chain([], executor, sleep_recorder)

    with pytest.raises(AllProvidersExhausted) as excinfo:
        await chain.attempt("Great kettle")

    assert excinfo.value.last_error is None
    assert executor.calls == []


async def test_trace_is_reset_between_calls(endpoints, make_executor, sleep_recorder):
    executor = make_executor(HttpError(500), POSITIVE_BODY, POSITIVE_BODY)
    chain = _chain(endpoints, executor, sleep_recorder)

    await chain.attempt("first")
    await chain.attempt("second")

    assert chain.states == [ChainState.IDLE, ChainState.TRYING, ChainState.SUCCESS]


async def test_malformed_endpoint_url_advances_to_next_provider(sleep_recorder):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=POSITIVE_BODY)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    endpoints = [
        InferenceEndpoint.direct("https://bad host\x00/x"),
        InferenceEndpoint.direct("https://ok.test/m"),
    ]
    chain = _chain(endpoints, RequestExecutor(client=client), sleep_recorder)

    result = await chain.attempt("Great kettle")

    assert result.label == SentimentLabel.POSITIVE
    assert result.source == SentimentSource.REMOTE
    assert result.metadata["endpoint_index"] == 1
    assert seen == ["https://ok.test/m"]
    assert ChainState.NEXT_PROVIDER in chain.states
    await client.aclose()
