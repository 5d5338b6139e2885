from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest
from conftest import FakeRunner, RecordingSleep

from iconset.icons.errors import GenerationErrorCode, ImageGenerationError
from iconset.icons.flux_client import (
    FLUX_MODEL_NAME,
    CostTracker,
    FluxGenerationRequest,
    FluxSchnellClient,
    build_flux_input,
)

URL = "https://replicate.delivery/pbxt/abc/out-0.webp"


class StatusError(Exception):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


def _client(runner, sleep, **kwargs) -> FluxSchnellClient:
    kwargs.setdefault("max_retries", 3)
    return FluxSchnellClient("r8_test", runner=runner, sleep=sleep, **kwargs)


def _generate(client: FluxSchnellClient, **req):
    req.setdefault("prompt", "stapler icon")
    req.setdefault("request_id", "1700-0")
    return asyncio.run(client.generate(FluxGenerationRequest(**req)))


def test_success_records_cost_and_returns_urls(recording_sleep):
    tracker = CostTracker("0.003")
    runner = FakeRunner([URL])
    client = _client(runner, recording_sleep, cost_tracker=tracker)

    result = _generate(client, seed=1234)

    assert result.image_urls == [URL]
    assert result.cost == Decimal("0.003")
    assert result.attempts == 1
    assert result.request_id == "1700-0"
    assert result.elapsed_s >= 0
    assert tracker.total_images_generated == 1
    assert tracker.total_cost == Decimal("0.003")
    assert client.cost_snapshot() == {"totalImagesGenerated": 1, "totalCost": 0.003, "costPerImage": 0.003}
    assert runner.calls[0]["seed"] == 1234
    assert runner.calls[0]["num_outputs"] == 1
    assert recording_sleep.delays == []


def test_authentication_failure_is_not_retried(recording_sleep):
    runner = FakeRunner(RuntimeError("ReplicateError: authentication failed"))
    client = _client(runner, recording_sleep)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client)

    assert exc.value.code is GenerationErrorCode.AUTHENTICATION_ERROR
    assert exc.value.request_id == "1700-0"
    assert len(runner.calls) == 1
    assert recording_sleep.delays == []


def test_status_401_is_not_retried(recording_sleep):
    runner = FakeRunner(StatusError(401, "Unauthenticated"))
    client = _client(runner, recording_sleep)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client)

    assert exc.value.code is GenerationErrorCode.AUTHENTICATION_ERROR
    assert len(runner.calls) == 1


@pytest.mark.parametrize(
    "error, code",
    [
        (ConnectionError("network is unreachable"), GenerationErrorCode.NETWORK_ERROR),
        (StatusError(429, "Too Many Requests"), GenerationErrorCode.RATE_LIMIT_EXCEEDED),
        (RuntimeError("polling timeout"), GenerationErrorCode.POLLING_TIMEOUT),
        (RuntimeError("something odd"), GenerationErrorCode.UNKNOWN_ERROR),
    ],
)
def test_transient_failures_retry_with_doubling_backoff(recording_sleep, error, code):
    runner = FakeRunner(error)
    client = _client(runner, recording_sleep, max_retries=4, base_retry_delay_s=1.0)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client)

    assert exc.value.code is code
    assert len(runner.calls) == 4
    assert recording_sleep.delays == [1.0, 2.0, 4.0]


def test_default_three_attempts_sleep_between_them(recording_sleep):
    runner = FakeRunner(ConnectionError("connection reset"))
    client = _client(runner, recording_sleep)

    with pytest.raises(ImageGenerationError):
        _generate(client)

    assert len(runner.calls) == 3
    assert recording_sleep.delays == [1.0, 2.0]


def test_recovers_after_transient_failure(recording_sleep):
    tracker = CostTracker()
    runner = FakeRunner(ConnectionError("connection reset"), [URL])
    client = _client(runner, recording_sleep, cost_tracker=tracker)

    result = _generate(client)

    assert result.attempts == 2
    assert result.image_urls == [URL]
    assert recording_sleep.delays == [1.0]
    assert tracker.total_images_generated == 1


def test_empty_output_fails_without_retry(recording_sleep):
    tracker = CostTracker()
    runner = FakeRunner([{}])
    client = _client(runner, recording_sleep, cost_tracker=tracker)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client)

    assert exc.value.code is GenerationErrorCode.GENERATION_FAILED
    assert len(runner.calls) == 1
    assert recording_sleep.delays == []
    assert tracker.total_images_generated == 0


def test_call_timeout_is_classified(recording_sleep):
    async def never_returns(model, payload):
        await asyncio.Event().wait()

    client = _client(never_returns, recording_sleep, timeout_s=0.01, max_retries=2)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client)

    assert exc.value.code is GenerationErrorCode.POLLING_TIMEOUT
    assert recording_sleep.delays == [1.0]


@pytest.mark.parametrize(
    "overrides",
    [
        {"prompt": "   "},
        {"num_inference_steps": 0},
        {"num_inference_steps": 13},
        {"width": 0},
        {"height": -5},
    ],
)
def test_invalid_input_fails_before_dispatch(recording_sleep, overrides):
    runner = FakeRunner([URL])
    client = _client(runner, recording_sleep)

    with pytest.raises(ImageGenerationError) as exc:
        _generate(client, **overrides)

    assert exc.value.code is GenerationErrorCode.INVALID_INPUT
    assert runner.calls == []
    assert recording_sleep.delays == []


def test_model_name_and_payload(recording_sleep):
    seen = {}

    async def runner(model, payload):
        seen["model"] = model
        return [URL]

    _generate(_client(runner, recording_sleep))
    assert seen["model"] == FLUX_MODEL_NAME

    payload = build_flux_input(FluxGenerationRequest(prompt="pen icon", seed=0))
    assert payload["seed"] == 0
    assert payload["aspect_ratio"] == "1:1"
    assert payload["num_inference_steps"] == 4
    assert "seed" not in build_flux_input(FluxGenerationRequest(prompt="pen icon"))


def test_cost_tracker_accumulates_across_calls():
    tracker = CostTracker(0.003)
    tracker.record(1)
    tracker.record(2)
    assert tracker.total_images_generated == 3
    assert tracker.total_cost == Decimal("0.009")
