from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .styles import StyleKey

PROMPT_MIN_LENGTH = 2
PROMPT_MAX_LENGTH = 30


class IconSetRequest(BaseModel):
    """Request body accepted by the icon-set endpoint."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    prompt: str = Field(..., min_length=PROMPT_MIN_LENGTH, max_length=PROMPT_MAX_LENGTH)
    style: StyleKey = StyleKey.BUSINESS

    @field_validator("prompt", mode="before")
    @classmethod
    def collapse_whitespace(cls, value: Any) -> Any:
        # Runs before the length bounds so they apply to the normalized prompt.
        if isinstance(value, str):
            return " ".join(value.split())
        return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class GeneratedIcon(_CamelModel):
    id: str
    item: str
    url: str
    download_url: str
    style: StyleKey
    original_prompt: str
    filename: str = ""
    error: str | None = None


class IconFailure(_CamelModel):
    index: int
    item: str
    code: str
    message: str


class IconSetMetrics(_CamelModel):
    requested: int
    successful: int
    failed: int
    total_cost_usd: float
    elapsed_s: float


class IconSetMetadata(_CamelModel):
    original_prompt: str
    style: StyleKey
    generated_items: list[str]
    metrics: IconSetMetrics
    failures: list[IconFailure] = Field(default_factory=list)


class IconSetResponse(_CamelModel):
    success: bool = True
    images: list[GeneratedIcon]
    metadata: IconSetMetadata


class ErrorResponse(_CamelModel):
    success: bool = False
    error: str
