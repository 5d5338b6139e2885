"""
Normalize the loosely-typed output of the image service into plain URLs.

Depending on client version and model, one output element can be a URL string, an
object or dict exposing a URL-like field, a file-like object whose ``str()`` is the
URL, or something unusable. Each element is classified by an ordered series of
total checks; nothing here raises on odd input.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

URL_FIELDS = ("url", "href", "src", "link", "uri", "path")
KNOWN_HOST_FRAGMENTS = ("replicate.delivery", "replicate.com", "pbxt.replicate")

_URL_SCHEME_RE = re.compile(r"^(https?|data):", re.IGNORECASE)


class OutputKind(str, Enum):
    PLAIN_URL = "plain_url"
    URL_BEARING_OBJECT = "url_bearing_object"
    STRING_COERCIBLE = "string_coercible"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ExtractedOutput:
    kind: OutputKind
    index: int
    url: str | None = None


def looks_like_url(text: str) -> bool:
    text = (text or "").strip()
    if not text:
        return False
    if _URL_SCHEME_RE.match(text):
        return True
    lowered = text.lower()
    return any(h in lowered for h in KNOWN_HOST_FRAGMENTS)


def _field_value(element: Any, name: str) -> Any:
    if isinstance(element, Mapping):
        return element.get(name)
    try:
        value = getattr(element, name, None)
    except Exception:
        return None
    # Bound methods (e.g. a url() accessor) are not invoked.
    return None if callable(value) else value


def _url_from_fields(element: Any) -> str | None:
    for name in URL_FIELDS:
        value = _field_value(element, name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _coerce_to_url(element: Any) -> str | None:
    if isinstance(element, (Mapping, list, tuple, set, bytes, bytearray)):
        return None
    try:
        text = str(element).strip()
    except Exception:
        return None
    return text if looks_like_url(text) else None


def classify_output(element: Any, index: int = 0) -> ExtractedOutput:
    if isinstance(element, str):
        if element.strip():
            return ExtractedOutput(OutputKind.PLAIN_URL, index, element.strip())
        return ExtractedOutput(OutputKind.UNRECOGNIZED, index)

    if element is None:
        return ExtractedOutput(OutputKind.UNRECOGNIZED, index)

    url = _url_from_fields(element)
    if url:
        return ExtractedOutput(OutputKind.URL_BEARING_OBJECT, index, url)

    url = _coerce_to_url(element)
    if url:
        return ExtractedOutput(OutputKind.STRING_COERCIBLE, index, url)

    return ExtractedOutput(OutputKind.UNRECOGNIZED, index)


def normalize_output(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return [raw]


def classify_outputs(raw: Any) -> list[ExtractedOutput]:
    return [classify_output(el, i) for i, el in enumerate(normalize_output(raw))]


def extract_image_urls(raw: Any) -> list[str]:
    return [o.url for o in classify_outputs(raw) if o.kind is not OutputKind.UNRECOGNIZED and o.url]
