from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Awaitable, Callable

import replicate

from .errors import GenerationErrorCode, ImageGenerationError, as_generation_error
from .outputs import extract_image_urls
from .rate_limiter import RateLimiter

log = logging.getLogger(__name__)

FLUX_MODEL_NAME = "black-forest-labs/flux-schnell"
DEFAULT_COST_PER_IMAGE_USD = "0.003"
MIN_INFERENCE_STEPS = 1
MAX_INFERENCE_STEPS = 12

Runner = Callable[[str, dict[str, Any]], Awaitable[Any]]


class CostTracker:
    """Process-lifetime usage counters shared by every generation on one client."""

    def __init__(self, cost_per_image: Decimal | float | str = DEFAULT_COST_PER_IMAGE_USD) -> None:
        self.cost_per_image = Decimal(str(cost_per_image))
        self._lock = threading.Lock()
        self._total_images = 0
        self._total_cost = Decimal("0")

    @property
    def total_images_generated(self) -> int:
        return self._total_images

    @property
    def total_cost(self) -> Decimal:
        return self._total_cost

    def record(self, image_count: int) -> Decimal:
        cost = self.cost_per_image * max(int(image_count), 0)
        with self._lock:
            self._total_images += max(int(image_count), 0)
            self._total_cost += cost
        return cost

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "totalImagesGenerated": self._total_images,
                "totalCost": float(self._total_cost),
                "costPerImage": float(self.cost_per_image),
            }


@dataclass(frozen=True)
class FluxGenerationRequest:
    prompt: str
    seed: int | None = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    num_inference_steps: int = 4
    width: int | None = None
    height: int | None = None
    aspect_ratio: str = "1:1"
    output_format: str = "webp"
    output_quality: int = 80
    go_fast: bool = True


@dataclass(frozen=True)
class FluxGenerationResult:
    request_id: str
    image_urls: list[str]
    cost: Decimal
    elapsed_s: float
    attempts: int
    timestamp: str


def validate_request(req: FluxGenerationRequest) -> None:
    def invalid(message: str) -> ImageGenerationError:
        return ImageGenerationError(message, GenerationErrorCode.INVALID_INPUT, request_id=req.request_id)

    if not (req.prompt or "").strip():
        raise invalid("Prompt is required and cannot be empty")
    if not (MIN_INFERENCE_STEPS <= int(req.num_inference_steps) <= MAX_INFERENCE_STEPS):
        raise invalid(f"num_inference_steps must be between {MIN_INFERENCE_STEPS} and {MAX_INFERENCE_STEPS}")
    if req.width is not None and req.width <= 0:
        raise invalid("Width must be greater than 0")
    if req.height is not None and req.height <= 0:
        raise invalid("Height must be greater than 0")


def build_flux_input(req: FluxGenerationRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "prompt": req.prompt,
        "go_fast": req.go_fast,
        "megapixels": "1",
        "num_outputs": 1,
        "aspect_ratio": req.aspect_ratio,
        "output_format": req.output_format,
        "output_quality": req.output_quality,
        "num_inference_steps": req.num_inference_steps,
    }
    if req.seed is not None:
        payload["seed"] = req.seed
    return payload


class FluxSchnellClient:
    """
    Text-to-image client for flux-schnell on Replicate.

    One call per request, bounded retries with exponential backoff, and URL extraction
    from whatever shape the service returns. Authentication and input failures are
    never retried.
    """

    def __init__(
        self,
        api_token: str,
        *,
        cost_tracker: CostTracker | None = None,
        timeout_s: float | None = 30.0,
        max_retries: int = 3,
        base_retry_delay_s: float = 1.0,
        rate_limiter: RateLimiter | None = None,
        runner: Runner | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        model: str = FLUX_MODEL_NAME,
    ) -> None:
        self.api_token = (api_token or "").strip()
        self.cost_tracker = cost_tracker or CostTracker()
        self.timeout_s = timeout_s if timeout_s and timeout_s > 0 else None
        self.max_retries = max(int(max_retries), 1)
        self.base_retry_delay_s = max(float(base_retry_delay_s), 0.0)
        self.rate_limiter = rate_limiter
        self.model = model
        self._runner = runner
        self._sleep = sleep
        self._replicate: replicate.Client | None = None

    def _replicate_client(self) -> replicate.Client:
        if self._replicate is None:
            self._replicate = replicate.Client(api_token=self.api_token, timeout=self.timeout_s)
        return self._replicate

    async def _replicate_run(self, model: str, payload: dict[str, Any]) -> Any:
        return await self._replicate_client().async_run(model, input=payload)

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed attempt ``attempt`` (1-based): base, 2*base, 4*base, ..."""
        return self.base_retry_delay_s * (2 ** (attempt - 1))

    async def _attempt(self, payload: dict[str, Any]) -> list[str]:
        if self.rate_limiter is not None:
            await self.rate_limiter.wait()

        runner = self._runner or self._replicate_run
        call = runner(self.model, payload)
        raw = await (asyncio.wait_for(call, timeout=self.timeout_s) if self.timeout_s else call)

        return extract_image_urls(raw)

    async def _run_with_retry(self, req: FluxGenerationRequest) -> tuple[list[str], int]:
        payload = build_flux_input(req)
        last_error: ImageGenerationError | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._attempt(payload), attempt
            except Exception as e:
                err = as_generation_error(e, request_id=req.request_id)
                last_error = err
                if not err.retryable:
                    log.warning("Image generation %s aborted (%s): %s", req.request_id, err.code.value, err)
                    break
                if attempt < self.max_retries:
                    delay = self.backoff_delay(attempt)
                    log.warning(
                        "Image generation %s attempt %d/%d failed (%s); retrying in %.1fs",
                        req.request_id,
                        attempt,
                        self.max_retries,
                        err.code.value,
                        delay,
                    )
                    await self._sleep(delay)

        if last_error is not None:
            raise last_error
        raise RuntimeError(f"Image generation failed without error details for request {req.request_id}")

    async def generate(self, req: FluxGenerationRequest) -> FluxGenerationResult:
        validate_request(req)

        started = time.monotonic()
        urls, attempts = await self._run_with_retry(req)
        elapsed = round(time.monotonic() - started, 3)
        # Each completed prediction is billed, so unusable output is not retried.
        if not urls:
            raise ImageGenerationError(
                "No images generated", GenerationErrorCode.GENERATION_FAILED, request_id=req.request_id
            )

        cost = self.cost_tracker.record(len(urls))
        log.debug("Image generation %s ok: %d url(s) in %.2fs", req.request_id, len(urls), elapsed)
        return FluxGenerationResult(
            request_id=req.request_id,
            image_urls=urls,
            cost=cost,
            elapsed_s=elapsed,
            attempts=attempts,
            timestamp=datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        )

    def cost_snapshot(self) -> dict[str, Any]:
        return self.cost_tracker.snapshot()
