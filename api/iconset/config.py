from __future__ import annotations

import os
from dataclasses import dataclass

from .icons.errors import ConfigurationError

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_PLACEHOLDER_URL = "/placeholder-icon.svg"


@dataclass(frozen=True)
class IconSetConfig:
    openai_api_key: str
    replicate_api_token: str
    openai_model: str
    openai_timeout_s: float
    replicate_timeout_s: float
    max_retries: int
    base_retry_delay_s: float
    rate_limit_interval_s: float
    cost_per_image_usd: float
    expansion_fallback_mode: bool
    placeholder_image_url: str
    log_level: str


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_float(name: str, default: float = 0.0) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _env_int(name: str, default: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _env_ms_as_seconds(name: str, default_ms: float) -> float:
    return max(_env_float(name, default_ms), 0.0) / 1000.0


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def get_iconset_config() -> IconSetConfig:
    """
    Resolve every setting the pipeline consumes from the environment, once.

    Timeouts, retry delay and rate-limit interval are given in milliseconds in the
    environment and stored as seconds.
    """
    return IconSetConfig(
        openai_api_key=_env_str("OPENAI_API_KEY"),
        replicate_api_token=_env_str("REPLICATE_API_TOKEN"),
        openai_model=_env_str("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        openai_timeout_s=_env_ms_as_seconds("API_TIMEOUT", 10_000),
        replicate_timeout_s=_env_ms_as_seconds("REPLICATE_API_TIMEOUT", 30_000),
        max_retries=max(_env_int("REPLICATE_MAX_RETRIES", 3), 1),
        base_retry_delay_s=_env_ms_as_seconds("REPLICATE_BASE_RETRY_DELAY", 1_000),
        rate_limit_interval_s=_env_ms_as_seconds("RATE_LIMIT_MS", 200),
        cost_per_image_usd=max(_env_float("REPLICATE_USD_PER_IMAGE", 0.003), 0.0),
        expansion_fallback_mode=_env_flag("ICON_EXPANSION_FALLBACK"),
        placeholder_image_url=_env_str("ICON_PLACEHOLDER_URL", DEFAULT_PLACEHOLDER_URL),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


def require_generation_credentials(cfg: IconSetConfig) -> None:
    # The OpenAI key is optional: item expansion falls back to a fixed list without it.
    if not cfg.replicate_api_token:
        raise ConfigurationError("REPLICATE_API_TOKEN is not set")
