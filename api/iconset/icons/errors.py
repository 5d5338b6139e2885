from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import httpx


class GenerationErrorCode(str, Enum):
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVALID_INPUT = "INVALID_INPUT"
    GENERATION_FAILED = "GENERATION_FAILED"
    POLLING_TIMEOUT = "POLLING_TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


NON_RETRYABLE_CODES = frozenset({GenerationErrorCode.AUTHENTICATION_ERROR, GenerationErrorCode.INVALID_INPUT})


class ConfigurationError(RuntimeError):
    """Required credentials or settings are missing."""


class UnknownStyleError(ValueError):
    def __init__(self, style_key: Any) -> None:
        self.style_key = style_key
        super().__init__(f"Unknown style: {style_key}")


class ImageGenerationError(RuntimeError):
    def __init__(
        self,
        message: str,
        code: GenerationErrorCode,
        *,
        request_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.request_id = request_id
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.code not in NON_RETRYABLE_CODES

    def __str__(self) -> str:
        base = super().__str__()
        if self.request_id:
            return f"[{self.code.value}] {base} (request {self.request_id})"
        return f"[{self.code.value}] {base}"


_MESSAGE_RULES: list[tuple[tuple[str, ...], GenerationErrorCode]] = [
    (("authentication", "unauthorized", "unauthenticated", "invalid token", "invalid api token"), GenerationErrorCode.AUTHENTICATION_ERROR),
    (("rate limit", "too many requests", "throttled"), GenerationErrorCode.RATE_LIMIT_EXCEEDED),
    (("invalid",), GenerationErrorCode.INVALID_INPUT),
    (("timeout", "timed out"), GenerationErrorCode.POLLING_TIMEOUT),
    (("network", "connection"), GenerationErrorCode.NETWORK_ERROR),
]


def _status_code(exc: BaseException) -> int | None:
    for attr in ("status", "status_code"):
        v = getattr(exc, attr, None)
        if isinstance(v, int):
            return v
    response = getattr(exc, "response", None)
    v = getattr(response, "status_code", None)
    return v if isinstance(v, int) else None


def classify_error(exc: BaseException) -> GenerationErrorCode:
    """
    Map an arbitrary failure from the image service onto the error taxonomy.

    Unmatched causes fall through to UNKNOWN_ERROR.
    """
    if isinstance(exc, ImageGenerationError):
        return exc.code

    status = _status_code(exc)
    if status in (401, 403):
        return GenerationErrorCode.AUTHENTICATION_ERROR
    if status == 429:
        return GenerationErrorCode.RATE_LIMIT_EXCEEDED

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return GenerationErrorCode.POLLING_TIMEOUT
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return GenerationErrorCode.NETWORK_ERROR

    message = str(exc).lower()
    for needles, code in _MESSAGE_RULES:
        if any(n in message for n in needles):
            return code

    if isinstance(exc, OSError):
        return GenerationErrorCode.NETWORK_ERROR
    return GenerationErrorCode.UNKNOWN_ERROR


def as_generation_error(exc: BaseException, *, request_id: str | None = None) -> ImageGenerationError:
    if isinstance(exc, ImageGenerationError):
        if exc.request_id is None and request_id is not None:
            exc.request_id = request_id
        return exc
    message = str(exc) or exc.__class__.__name__
    return ImageGenerationError(message, classify_error(exc), request_id=request_id, cause=exc)
