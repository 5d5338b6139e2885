from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from .errors import GenerationErrorCode, as_generation_error
from .expander import ChatFn, ExpansionConfig, expand_to_items
from .filenames import format_icon_filename
from .flux_client import FluxGenerationRequest, FluxSchnellClient
from .models import GeneratedIcon, IconFailure, IconSetMetrics
from .prompt_builder import compose_icon_prompt
from .seeds import derive_base_seed, derive_item_seed
from .styles import StyleKey, get_style_preset

if TYPE_CHECKING:
    from ..config import IconSetConfig

log = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_URL = "/placeholder-icon.svg"
ICON_OUTPUT_FORMAT = "png"


@dataclass(frozen=True)
class ItemOutcome:
    index: int
    item: str
    url: str | None = None
    cost: Decimal = Decimal("0")
    error_code: GenerationErrorCode | None = None
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.url is not None


@dataclass(frozen=True)
class IconSetResult:
    icons: list[GeneratedIcon]
    items: list[str]
    metrics: IconSetMetrics
    failures: list[IconFailure]


def expansion_config_from(cfg: IconSetConfig | None) -> ExpansionConfig:
    if cfg is None:
        return ExpansionConfig()
    return ExpansionConfig(
        openai_api_key=cfg.openai_api_key,
        fallback_mode=cfg.expansion_fallback_mode,
        model=cfg.openai_model,
        timeout_s=cfg.openai_timeout_s,
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


async def _generate_one(
    *,
    client: FluxSchnellClient,
    item: str,
    index: int,
    style_key: StyleKey,
    base_seed: int,
    timestamp: int,
) -> ItemOutcome:
    prompt = compose_icon_prompt(item, style_key)
    req = FluxGenerationRequest(
        prompt=prompt.as_generation_prompt(),
        seed=derive_item_seed(base_seed, index),
        request_id=f"{timestamp}-{index}",
        output_format=ICON_OUTPUT_FORMAT,
    )
    try:
        result = await client.generate(req)
    except Exception as e:  # noqa: BLE001
        err = as_generation_error(e, request_id=req.request_id)
        log.warning("Icon %d (%s) failed: %s", index, item, err)
        return ItemOutcome(index=index, item=item, error_code=err.code, error_message=str(err))
    return ItemOutcome(index=index, item=item, url=result.image_urls[0], cost=result.cost)


def _safe_filename(item: str, style_key: StyleKey, index: int) -> str:
    try:
        return format_icon_filename(item, style_key.value, ICON_OUTPUT_FORMAT)
    except ValueError:
        # No ASCII alphanumerics in the item, e.g. a non-Latin expansion.
        return format_icon_filename(f"icon-{index}", style_key.value, ICON_OUTPUT_FORMAT)


def _to_icon(
    outcome: ItemOutcome,
    *,
    prompt: str,
    style_key: StyleKey,
    timestamp: int,
    placeholder_url: str,
) -> GeneratedIcon:
    base_id = f"icon-{timestamp}-{outcome.index}"
    if outcome.ok:
        return GeneratedIcon(
            id=base_id,
            item=outcome.item,
            url=outcome.url,
            download_url=outcome.url,
            style=style_key,
            original_prompt=prompt,
            filename=_safe_filename(outcome.item, style_key, outcome.index),
        )
    return GeneratedIcon(
        id=f"{base_id}-error",
        item=outcome.item,
        url=placeholder_url,
        download_url=placeholder_url,
        style=style_key,
        original_prompt=prompt,
        filename=_safe_filename(outcome.item, style_key, outcome.index),
        error=(outcome.error_code or GenerationErrorCode.UNKNOWN_ERROR).value,
    )


async def generate_icon_set(
    prompt: str,
    style_key: StyleKey | str,
    *,
    image_client: FluxSchnellClient,
    config: IconSetConfig | None = None,
    timestamp: int | None = None,
    chat: ChatFn | None = None,
) -> IconSetResult:
    """
    Expand ``prompt`` into 8 items and generate one icon per item concurrently.

    Per-item failures become placeholder icons; the set as a whole does not fail
    because of them. An unknown style raises ``UnknownStyleError`` before any
    external call.
    """
    preset = get_style_preset(style_key)
    style = preset.key
    ts = _now_ms() if timestamp is None else int(timestamp)
    placeholder_url = config.placeholder_image_url if config is not None else DEFAULT_PLACEHOLDER_URL
    started = time.monotonic()

    items = await expand_to_items(prompt, expansion_config_from(config), chat=chat)
    base_seed = derive_base_seed(prompt, style, ts)

    outcomes = await asyncio.gather(
        *[
            _generate_one(
                client=image_client,
                item=item,
                index=i,
                style_key=style,
                base_seed=base_seed,
                timestamp=ts,
            )
            for i, item in enumerate(items)
        ]
    )

    icons = [
        _to_icon(o, prompt=prompt, style_key=style, timestamp=ts, placeholder_url=placeholder_url) for o in outcomes
    ]
    failures = [
        IconFailure(
            index=o.index,
            item=o.item,
            code=(o.error_code or GenerationErrorCode.UNKNOWN_ERROR).value,
            message=o.error_message,
        )
        for o in outcomes
        if not o.ok
    ]
    successful = sum(1 for o in outcomes if o.ok)
    metrics = IconSetMetrics(
        requested=len(outcomes),
        successful=successful,
        failed=len(outcomes) - successful,
        total_cost_usd=float(sum((o.cost for o in outcomes), Decimal("0"))),
        elapsed_s=round(time.monotonic() - started, 3),
    )
    log.info(
        'Icon set "%s" (%s): %d/%d generated, cost $%.4f, %.1fs',
        prompt,
        style.value,
        metrics.successful,
        metrics.requested,
        metrics.total_cost_usd,
        metrics.elapsed_s,
    )
    return IconSetResult(icons=icons, items=list(items), metrics=metrics, failures=failures)
