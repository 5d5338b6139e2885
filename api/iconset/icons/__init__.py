"""Icon-set pipeline: style presets, item expansion, prompt composition, seeds and image generation."""

from .errors import ConfigurationError, GenerationErrorCode, ImageGenerationError, UnknownStyleError
from .expander import FALLBACK_ITEMS, expand_to_items
from .flux_client import CostTracker, FluxGenerationRequest, FluxSchnellClient
from .models import GeneratedIcon, IconSetRequest, IconSetResponse
from .pipeline import IconSetResult, generate_icon_set
from .prompt_builder import IconPrompt, compose_icon_prompt
from .seeds import derive_base_seed, derive_item_seed
from .styles import STYLE_PRESETS, StyleKey, get_style_preset

__all__ = [
    "ConfigurationError",
    "GenerationErrorCode",
    "ImageGenerationError",
    "UnknownStyleError",
    "FALLBACK_ITEMS",
    "expand_to_items",
    "CostTracker",
    "FluxGenerationRequest",
    "FluxSchnellClient",
    "GeneratedIcon",
    "IconSetRequest",
    "IconSetResponse",
    "IconSetResult",
    "generate_icon_set",
    "IconPrompt",
    "compose_icon_prompt",
    "derive_base_seed",
    "derive_item_seed",
    "STYLE_PRESETS",
    "StyleKey",
    "get_style_preset",
]
