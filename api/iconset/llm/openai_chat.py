from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

OPENAI_API_BASE = "https://api.openai.com/v1"


@dataclass(frozen=True)
class ChatResult:
    text: str
    model: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


def _usage_int(usage: dict[str, Any], key: str) -> int:
    v = usage.get(key)
    return int(v) if isinstance(v, (int, float)) else 0


def parse_chat_response(data: Any, *, requested_model: str) -> ChatResult:
    if not isinstance(data, dict):
        raise ValueError("Unexpected OpenAI response")

    usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
    model_used = str(data.get("model") or requested_model).strip() or requested_model

    choices = data.get("choices") or []
    if not isinstance(choices, list) or not choices:
        raise ValueError("OpenAI returned no choices")
    msg = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = (msg or {}).get("content") if isinstance(msg, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise ValueError("OpenAI response missing message.content")

    return ChatResult(
        text=content.strip(),
        model=model_used,
        prompt_tokens=_usage_int(usage, "prompt_tokens"),
        completion_tokens=_usage_int(usage, "completion_tokens"),
        total_tokens=_usage_int(usage, "total_tokens"),
    )


async def chat_text(
    *,
    api_key: str,
    model: str,
    system: str,
    user: str,
    temperature: float = 0.3,
    max_tokens: int = 200,
    timeout_s: float = 10.0,
    client: httpx.AsyncClient | None = None,
) -> ChatResult:
    """
    Minimal async Chat Completions call that returns message.content as text.
    """
    api_key = (api_key or "").strip()
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set")
    model = (model or "").strip()
    if not model:
        raise ValueError("model is required")

    body = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "temperature": float(temperature),
        "max_tokens": int(max_tokens),
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    if client is not None:
        resp = await client.post(f"{OPENAI_API_BASE}/chat/completions", json=body, headers=headers, timeout=timeout_s)
    else:
        async with httpx.AsyncClient(timeout=timeout_s) as owned:
            resp = await owned.post(f"{OPENAI_API_BASE}/chat/completions", json=body, headers=headers)

    if resp.status_code != 200:
        raise RuntimeError(f"OpenAI request failed: HTTP {resp.status_code} {resp.text[:400]}")

    return parse_chat_response(resp.json(), requested_model=model)
