from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from iconset.config import IconSetConfig, get_iconset_config, require_generation_credentials
from iconset.icons.errors import ConfigurationError
from iconset.icons.flux_client import CostTracker, FluxSchnellClient
from iconset.icons.models import ErrorResponse, IconSetMetadata, IconSetRequest, IconSetResponse
from iconset.icons.pipeline import generate_icon_set
from iconset.icons.rate_limiter import RateLimiter
from iconset.icons.styles import list_styles
from iconset.logging_config import setup_logging

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> IconSetConfig:
    return get_iconset_config()


@lru_cache(maxsize=1)
def get_image_client() -> FluxSchnellClient:
    cfg = get_settings()
    return FluxSchnellClient(
        cfg.replicate_api_token,
        cost_tracker=CostTracker(cfg.cost_per_image_usd),
        timeout_s=cfg.replicate_timeout_s,
        max_retries=cfg.max_retries,
        base_retry_delay_s=cfg.base_retry_delay_s,
        rate_limiter=RateLimiter(cfg.rate_limit_interval_s),
    )


setup_logging(get_settings().log_level)

app = FastAPI(title="Icon Set Generator API", docs_url="/docs", redoc_url=None)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump(by_alias=True))


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        loc = [str(x) for x in err.get("loc", ())]
        if "prompt" not in loc:
            continue
        blank = isinstance(err.get("input"), str) and not err["input"].strip()
        if err.get("type") in {"missing", "string_type"} or blank:
            return "Prompt is required"
    if errors:
        first = errors[0]
        field = ".".join(str(x) for x in first.get("loc", ()) if x != "body") or "body"
        return f"Invalid request: {field}: {first.get('msg', 'invalid value')}"
    return "Invalid request"


@app.exception_handler(RequestValidationError)
async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
    return _error(400, _validation_message(exc))


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/api/styles")
def styles() -> dict[str, Any]:
    return {"styles": list_styles()}


@app.get("/api/usage")
def usage(client: FluxSchnellClient = Depends(get_image_client)) -> dict[str, Any]:
    return client.cost_snapshot()


@app.post("/api/generate-icons")
async def generate_icons(
    body: IconSetRequest,
    cfg: IconSetConfig = Depends(get_settings),
    client: FluxSchnellClient = Depends(get_image_client),
) -> JSONResponse:
    try:
        require_generation_credentials(cfg)
    except ConfigurationError as e:
        log.error("Icon generation refused: %s", e)
        return _error(500, f"Configuration error: {e}")

    try:
        result = await generate_icon_set(body.prompt, body.style, image_client=client, config=cfg)
    except Exception:
        log.exception('Icon generation failed for "%s" (%s)', body.prompt, body.style.value)
        return _error(500, "Failed to generate icons")

    response = IconSetResponse(
        images=result.icons,
        metadata=IconSetMetadata(
            original_prompt=body.prompt,
            style=body.style,
            generated_items=result.items,
            metrics=result.metrics,
            failures=result.failures,
        ),
    )
    return JSONResponse(content=response.model_dump(mode="json", by_alias=True))
