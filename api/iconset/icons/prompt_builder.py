from __future__ import annotations

from dataclasses import dataclass

from .styles import StyleKey, StylePreset, get_style_preset

SET_SIZE = 8
CANVAS_PX = 512
BACKGROUND_HEX = "#F5F5F5"

GLOBAL_CONSTRAINTS: tuple[str, ...] = (
    f"{CANVAS_PX}x{CANVAS_PX} pixels",
    "square 1:1 canvas",
    f"plain solid light grey {BACKGROUND_HEX} background",
    "professional icon design",
    "high clarity",
    "single object only",
    "object centered with even margins",
    "ABSOLUTELY NO TEXT OR LABELS",
    "clean design",
    "no people",
    "no hands",
    "no multiple objects",
)

GLOBAL_NEGATIVES: tuple[str, ...] = (
    "no text",
    "no letters",
    "no numbers",
    "no labels",
    "no words",
    "no watermark",
    "no background color change",
    "no size variation between icons",
)

_BACKGROUND_HINTS = {
    "plain": "subject on the plain background with no backdrop shapes",
    "white": "subject on a clean white backdrop",
    "badge": "subject inside one circular badge that fills the canvas",
}
_STROKE_HINTS = {
    "none": "no outline strokes",
    "thin": "thin consistent outline",
    "medium": "medium consistent outline",
    "thick": "thick consistent outline",
}
_SHADING_HINTS = {
    "flat": "flat shading",
    "soft": "soft shading",
    "3d": "three-dimensional shading",
}


@dataclass(frozen=True)
class IconPrompt:
    item: str
    positive: str
    negative: str
    style_key: StyleKey

    def as_generation_prompt(self) -> str:
        # flux-schnell has no negative prompt input; exclusions travel inline.
        return f"{self.positive}, negative: {self.negative}"


def _item_layer(item: str) -> list[str]:
    return [
        f"{item} icon",
        f"a single {item} as the only subject",
        f"realistic, recognizable {item} structure and proportions",
    ]


def _style_layer(item: str, preset: StylePreset) -> list[str]:
    return [
        preset.render_fragment(item),
        _BACKGROUND_HINTS[preset.background],
        _STROKE_HINTS[preset.stroke],
        _SHADING_HINTS[preset.shading],
        f"{item} occupies the same canvas fraction as every icon in this {preset.display_label} set",
        f"part of cohesive {SET_SIZE}-icon set",
    ]


def build_negative_prompt(preset: StylePreset) -> str:
    return ", ".join([*GLOBAL_NEGATIVES, preset.negatives])


def compose_icon_prompt(item: str, style_key: StyleKey | str) -> IconPrompt:
    """
    Compose the positive and negative instructions for one icon.

    Layers are item, then style, then global constraints. The result depends only on
    (item, style_key), so identical inputs always produce identical strings.
    """
    preset = get_style_preset(style_key)
    subject = " ".join((item or "").split())
    if not subject:
        raise ValueError("item is required")

    positive = ", ".join([*_item_layer(subject), *_style_layer(subject, preset), *GLOBAL_CONSTRAINTS])
    return IconPrompt(
        item=subject,
        positive=positive,
        negative=build_negative_prompt(preset),
        style_key=preset.key,
    )
