from __future__ import annotations

import re

ALLOWED_FORMATS = {"png", "jpg"}

_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")


def slugify(s: str) -> str:
    out: list[str] = []
    last_dash = False
    for ch in s.strip().lower():
        if ch.isascii() and ch.isalnum():
            out.append(ch)
            last_dash = False
        else:
            if not last_dash and out:
                out.append("-")
                last_dash = True
    return "".join(out).strip("-")


def format_icon_filename(item: str, style: str, fmt: str = "png") -> str:
    if fmt not in ALLOWED_FORMATS:
        raise ValueError(f'Invalid format "{fmt}". Only "png" and "jpg" are supported.')
    if not isinstance(item, str) or not _ALNUM_RE.search(item):
        raise ValueError("Item name must contain at least one alphanumeric character")
    if not isinstance(style, str) or not _ALNUM_RE.search(style):
        raise ValueError("Style name must contain at least one alphanumeric character")
    return f"{slugify(item)}-{slugify(style)}-icon.{fmt}"
