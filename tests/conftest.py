"""Shared fakes for the icon-set tests."""

from __future__ import annotations

from typing import Any

import pytest

from iconset.config import IconSetConfig


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeRunner:
    """Stands in for the Replicate call; returns or raises queued outcomes."""

    def __init__(self, *outcomes: Any, by_prompt: Any = None) -> None:
        self.outcomes = list(outcomes)
        self.by_prompt = by_prompt
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, model: str, payload: dict[str, Any]) -> Any:
        self.calls.append(payload)
        if self.by_prompt is not None:
            outcome = self.by_prompt(payload)
        elif len(self.outcomes) > 1:
            outcome = self.outcomes.pop(0)
        else:
            outcome = self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_config(**overrides: Any) -> IconSetConfig:
    values: dict[str, Any] = {
        "openai_api_key": "",
        "replicate_api_token": "r8_test",
        "openai_model": "gpt-4o-mini",
        "openai_timeout_s": 1.0,
        "replicate_timeout_s": 5.0,
        "max_retries": 3,
        "base_retry_delay_s": 1.0,
        "rate_limit_interval_s": 0.0,
        "cost_per_image_usd": 0.003,
        "expansion_fallback_mode": False,
        "placeholder_image_url": "/placeholder-icon.svg",
        "log_level": "INFO",
    }
    values.update(overrides)
    return IconSetConfig(**values)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config() -> IconSetConfig:
    return make_config()
