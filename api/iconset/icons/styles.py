from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Mapping

from .errors import UnknownStyleError

ITEM_PLACEHOLDER = "{ITEM}"

Background = Literal["plain", "white", "badge"]
Stroke = Literal["none", "thin", "medium", "thick"]
Shading = Literal["flat", "soft", "3d"]


class StyleKey(str, Enum):
    BUSINESS = "Business"
    CARTOON = "Cartoon"
    THREE_D_MODEL = "ThreeDModel"
    GRADIENT = "Gradient"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StylePreset:
    key: StyleKey
    display_label: str
    fragment: str
    negatives: str
    background: Background
    stroke: Stroke
    shading: Shading

    def render_fragment(self, item: str) -> str:
        return self.fragment.replace(ITEM_PLACEHOLDER, item)


_PRESETS = (
    StylePreset(
        key=StyleKey.BUSINESS,
        display_label="Business",
        fragment=(
            "professional glyph icon of a {ITEM}, white symbol on circular badge, high contrast, "
            "crisp vector edges, balanced margins, minimal decoration"
        ),
        negatives="no cute faces, no sketchy texture, no 3D render, no drop shadows",
        background="badge",
        stroke="none",
        shading="flat",
    ),
    StylePreset(
        key=StyleKey.CARTOON,
        display_label="Cartoon",
        fragment=(
            "cartoon icon of a {ITEM} with rounded proportions, friendly expression optional, "
            "soft highlights and shadows, warm approachable palette, thicker outline"
        ),
        negatives="no complex scene, no hard-edged geometry, no photoreal materials",
        background="plain",
        stroke="medium",
        shading="soft",
    ),
    StylePreset(
        key=StyleKey.THREE_D_MODEL,
        display_label="3D Model",
        fragment=(
            "3D icon of a {ITEM}, beveled edges, soft studio lighting, subtle ambient occlusion, "
            "clean smooth materials, single object, neutral background, high clarity"
        ),
        negatives="no busy environment, no noisy texture, no text or watermark, no harsh reflections",
        background="plain",
        stroke="none",
        shading="3d",
    ),
    StylePreset(
        key=StyleKey.GRADIENT,
        display_label="Gradient",
        fragment=(
            "gradient vector icon of a {ITEM} with smooth 2-3 color gradient fill, crisp silhouette, "
            "very thin or no outline, modern minimal look"
        ),
        negatives="no inner shadows, no 3D shading, no texture noise, no heavy outlines",
        background="plain",
        stroke="thin",
        shading="flat",
    ),
)

STYLE_PRESETS: Mapping[StyleKey, StylePreset] = MappingProxyType({p.key: p for p in _PRESETS})


def get_style_preset(style_key: StyleKey | str) -> StylePreset:
    """Exact, case-sensitive lookup; unknown keys raise rather than default."""
    if isinstance(style_key, StyleKey):
        return STYLE_PRESETS[style_key]
    if isinstance(style_key, str):
        for key, preset in STYLE_PRESETS.items():
            if key.value == style_key:
                return preset
    raise UnknownStyleError(style_key)


def list_styles() -> list[dict[str, Any]]:
    return [
        {
            "key": p.key.value,
            "label": p.display_label,
            "background": p.background,
            "stroke": p.stroke,
            "shading": p.shading,
        }
        for p in STYLE_PRESETS.values()
    ]
