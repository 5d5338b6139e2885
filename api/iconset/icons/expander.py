from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ..llm.openai_chat import ChatResult, chat_text

log = logging.getLogger(__name__)

ITEM_COUNT = 8

FALLBACK_ITEMS: tuple[str, ...] = (
    "paper clip",
    "stapler",
    "pen",
    "calculator",
    "folder",
    "notebook",
    "scissors",
    "ruler",
)

EXPANSION_TEMPERATURE = 0.3
EXPANSION_MAX_TOKENS = 200

EXPANSION_SYSTEM_PROMPT = """
Convert the user input into exactly 8 concrete, physical objects that would make good icons.

Examples:
Input: "office supplies" -> ["paper clip", "stapler", "pen", "calculator", "folder", "notebook", "scissors", "ruler"]
Input: "sports" -> ["ball", "trophy", "whistle", "stopwatch", "medal", "helmet", "shoes", "goal"]

Rules:
- Always return exactly 8 items
- Items must be recognizable physical objects (nouns), suitable as icon subjects
- Suitable for icon design (simple, clear shapes)
- Different objects, not variations of the same thing
- Return a JSON array of strings only, no prose, no explanation
""".strip()

ChatFn = Callable[..., Awaitable[ChatResult]]

_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


@dataclass(frozen=True)
class ExpansionConfig:
    openai_api_key: str = ""
    fallback_mode: bool = False
    model: str = "gpt-4o-mini"
    timeout_s: float = 10.0


def fallback_items() -> list[str]:
    return list(FALLBACK_ITEMS)


def parse_item_list(text: str) -> list[str]:
    """Parse a model reply into exactly 8 trimmed items or raise ValueError."""
    text = (text or "").strip()
    m = _FENCE_RE.match(text)
    if m:
        text = m.group(1).strip()

    items: Any = json.loads(text)
    if not isinstance(items, list) or len(items) != ITEM_COUNT:
        raise ValueError("Invalid response format: expected a JSON array of 8 items")

    out: list[str] = []
    for x in items:
        if not isinstance(x, str) or not x.strip():
            raise ValueError("Invalid response format: items must be non-empty strings")
        out.append(x.strip())
    return out


async def expand_to_items(
    user_input: str,
    config: ExpansionConfig | None = None,
    *,
    chat: ChatFn | None = None,
) -> list[str]:
    """
    Expand free text into exactly 8 concrete icon subjects.

    Without an API key, or in fallback mode, the fixed fallback list is returned
    without any network call. Every failure of the language call (transport, timeout,
    bad JSON, wrong length) is absorbed and also yields the fallback list.
    """
    cfg = config or ExpansionConfig()
    if not cfg.openai_api_key.strip() or cfg.fallback_mode:
        log.warning('Using fallback items for "%s" - OpenAI not available', user_input)
        return fallback_items()

    chat_fn = chat or chat_text
    try:
        result = await chat_fn(
            api_key=cfg.openai_api_key,
            model=cfg.model,
            system=EXPANSION_SYSTEM_PROMPT,
            user=f'Expand "{(user_input or "").strip()}" into 8 objects. Return JSON array only.',
            temperature=EXPANSION_TEMPERATURE,
            max_tokens=EXPANSION_MAX_TOKENS,
            timeout_s=cfg.timeout_s,
        )
        items = parse_item_list(result.text)
    except Exception as e:  # noqa: BLE001
        log.warning('OpenAI expansion failed for "%s", using fallback items: %s', user_input, e)
        return fallback_items()

    log.debug('Expanded "%s" to items %s (%d tokens)', user_input, items, result.total_tokens)
    return items
