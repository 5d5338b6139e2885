from __future__ import annotations

import asyncio

import httpx
import pytest

from iconset.icons.errors import GenerationErrorCode, ImageGenerationError, as_generation_error, classify_error


class StatusError(Exception):
    def __init__(self, status: int, message: str = "request failed") -> None:
        super().__init__(message)
        self.status = status


@pytest.mark.parametrize(
    "exc, code",
    [
        (StatusError(401), GenerationErrorCode.AUTHENTICATION_ERROR),
        (StatusError(403), GenerationErrorCode.AUTHENTICATION_ERROR),
        (StatusError(429), GenerationErrorCode.RATE_LIMIT_EXCEEDED),
        (RuntimeError("You did not pass an authentication token"), GenerationErrorCode.AUTHENTICATION_ERROR),
        (RuntimeError("Rate limit reached for requests"), GenerationErrorCode.RATE_LIMIT_EXCEEDED),
        (ValueError("invalid input: prompt"), GenerationErrorCode.INVALID_INPUT),
        (asyncio.TimeoutError(), GenerationErrorCode.POLLING_TIMEOUT),
        (httpx.ReadTimeout("read timed out"), GenerationErrorCode.POLLING_TIMEOUT),
        (httpx.ConnectError("connect failed"), GenerationErrorCode.NETWORK_ERROR),
        (ConnectionResetError("reset by peer"), GenerationErrorCode.NETWORK_ERROR),
        (RuntimeError("network unreachable"), GenerationErrorCode.NETWORK_ERROR),
        (RuntimeError("prediction failed: CUDA OOM"), GenerationErrorCode.UNKNOWN_ERROR),
    ],
)
def test_classify_error(exc, code):
    assert classify_error(exc) is code


def test_retryable_flags():
    assert not ImageGenerationError("x", GenerationErrorCode.AUTHENTICATION_ERROR).retryable
    assert not ImageGenerationError("x", GenerationErrorCode.INVALID_INPUT).retryable
    for code in (
        GenerationErrorCode.RATE_LIMIT_EXCEEDED,
        GenerationErrorCode.POLLING_TIMEOUT,
        GenerationErrorCode.NETWORK_ERROR,
        GenerationErrorCode.GENERATION_FAILED,
        GenerationErrorCode.UNKNOWN_ERROR,
    ):
        assert ImageGenerationError("x", code).retryable


def test_as_generation_error_attaches_request_id():
    cause = ConnectionError("connection refused")
    err = as_generation_error(cause, request_id="1700-3")
    assert err.code is GenerationErrorCode.NETWORK_ERROR
    assert err.request_id == "1700-3"
    assert err.cause is cause
    assert "1700-3" in str(err)
    assert as_generation_error(err) is err
