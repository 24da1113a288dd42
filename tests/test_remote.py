"""Tests for the remote strategy against a mocked messages endpoint."""

import json

import httpx
import pytest

from sparkling.config.simulation_config import InferenceConfig
from sparkling.inference import InferenceContext, RemoteStrategy

ENDPOINT = "https://reasoning.test/v1/messages"


def make_context():
    return InferenceContext(
        sparkling_id=3,
        state="seeking_food",
        food=20.0,
        max_food=100.0,
        neural_energy=80.0,
        max_neural_energy=100.0,
        prompt="What should I change?",
    )


def message_body(text):
    return {"id": "msg_1", "type": "message", "content": [{"type": "text", "text": text}]}


@pytest.mark.asyncio
async def test_direct_request_shape_and_success():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json=message_body('{"reasoning": "Go find food", "parameters": {"hungerThreshold": 0.5}}'),
        )

    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(handler))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert result.success
    assert result.strategy == "remote"
    assert result.reasoning == "Go find food"
    assert result.parameters == {"hungerThreshold": 0.5}
    assert result.latency >= 0

    (request,) = seen
    assert request.url == ENDPOINT
    assert request.headers["x-api-key"] == "secret"
    assert request.headers["anthropic-version"] == "2023-06-01"
    payload = json.loads(request.content)
    assert payload["model"] == config.model
    assert payload["messages"] == [{"role": "user", "content": "What should I change?"}]
    assert payload["max_tokens"] == config.max_tokens


@pytest.mark.asyncio
async def test_relay_mode_sends_no_credential():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=message_body('{"reasoning": "fine", "parameters": {}}'))

    config = InferenceConfig(strategy="remote", use_relay=True, api_endpoint="http://relay.test/api/anthropic/messages")
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(handler))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert result.success
    assert "x-api-key" not in seen[0].headers
    assert "anthropic-version" not in seen[0].headers


@pytest.mark.asyncio
async def test_error_status_fails_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500, json={"error": "upstream exploded"})

    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(handler))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert not result.success
    assert len(calls) == 1
    assert "HTTP 500" in result.error


@pytest.mark.asyncio
async def test_timeouts_are_retried_then_reported(monkeypatch):
    monkeypatch.setattr(RemoteStrategy, "RETRY_DELAY", 0)
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectTimeout("timed out", request=request)

    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT, max_retries=2)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(handler))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert not result.success
    assert len(calls) == 3
    assert "after 2 retries" in result.error


@pytest.mark.asyncio
async def test_transient_error_recovers_on_retry(monkeypatch):
    monkeypatch.setattr(RemoteStrategy, "RETRY_DELAY", 0)
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=message_body('{"reasoning": "second try", "parameters": {}}'))

    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(handler))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert result.success
    assert result.reasoning == "second try"
    assert len(calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"content": [{"type": "text", "text": "I would rather not say."}]}),
        httpx.Response(200, json={"unexpected": True}),
    ],
)
async def test_unusable_bodies_become_failures(response):
    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(lambda request: response))
    try:
        result = await strategy.infer(make_context())
    finally:
        await strategy.close()

    assert not result.success
    assert result.error


@pytest.mark.asyncio
async def test_missing_client_becomes_failure(monkeypatch):
    config = InferenceConfig(strategy="remote", api_key="secret", api_endpoint=ENDPOINT)
    strategy = RemoteStrategy(config, transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    async def no_client():
        return None

    monkeypatch.setattr(strategy, "start", no_client)
    result = await strategy.infer(make_context())

    assert not result.success
    assert "not available" in result.reasoning
