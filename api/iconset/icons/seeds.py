from __future__ import annotations

from .styles import StyleKey

SEED_MODULUS = 2**31 - 1
# Prime stride keeps adjacent item seeds apart.
SEED_STRIDE = 137


def derive_base_seed(prompt_text: str, style_key: StyleKey | str, timestamp: int | str) -> int:
    key = style_key.value if isinstance(style_key, StyleKey) else str(style_key)
    material = f"{prompt_text}-{key}-{timestamp}"
    return sum(ord(ch) for ch in material) % SEED_MODULUS


def derive_item_seed(base_seed: int, index: int) -> int:
    if index < 0:
        raise ValueError("index must be >= 0")
    return (base_seed + index * SEED_STRIDE) % SEED_MODULUS


def derive_item_seeds(base_seed: int, count: int = 8) -> list[int]:
    return [derive_item_seed(base_seed, i) for i in range(count)]
