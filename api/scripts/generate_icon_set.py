#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import replace

from iconset.config import get_iconset_config, require_generation_credentials
from iconset.icons.errors import ConfigurationError
from iconset.icons.flux_client import CostTracker, FluxSchnellClient
from iconset.icons.pipeline import generate_icon_set
from iconset.icons.rate_limiter import RateLimiter
from iconset.icons.styles import StyleKey
from iconset.logging_config import setup_logging


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Generate an 8-icon set from a short prompt.")
    ap.add_argument("--prompt", required=True, help="Short theme, e.g. 'music'")
    ap.add_argument("--style", default=StyleKey.BUSINESS.value, choices=[k.value for k in StyleKey])
    ap.add_argument("--fallback", action="store_true", help="Skip the language model and use the fixed item list")
    ap.add_argument("--json", action="store_true", help="Print the full result as JSON")
    return ap.parse_args()


async def run(args: argparse.Namespace) -> int:
    cfg = get_iconset_config()
    if args.fallback:
        cfg = replace(cfg, expansion_fallback_mode=True)
    try:
        require_generation_credentials(cfg)
    except ConfigurationError:
        raise SystemExit("Missing env var: REPLICATE_API_TOKEN")

    setup_logging(cfg.log_level)
    client = FluxSchnellClient(
        cfg.replicate_api_token,
        cost_tracker=CostTracker(cfg.cost_per_image_usd),
        timeout_s=cfg.replicate_timeout_s,
        max_retries=cfg.max_retries,
        base_retry_delay_s=cfg.base_retry_delay_s,
        rate_limiter=RateLimiter(cfg.rate_limit_interval_s),
    )
    result = await generate_icon_set(args.prompt.strip(), args.style, image_client=client, config=cfg)

    if args.json:
        print(
            json.dumps(
                {
                    "images": [i.model_dump(mode="json", by_alias=True) for i in result.icons],
                    "items": result.items,
                    "metrics": result.metrics.model_dump(by_alias=True),
                    "failures": [f.model_dump(by_alias=True) for f in result.failures],
                },
                indent=2,
            )
        )
    else:
        for icon in result.icons:
            status = icon.error or "ok"
            print(f"{icon.id}\t{icon.item}\t{status}\t{icon.url}")
        m = result.metrics
        print(f"Generated {m.successful}/{m.requested} icons. Cost: ${m.total_cost_usd:.4f}.")

    return 0 if result.metrics.successful else 1


def main() -> None:
    raise SystemExit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
