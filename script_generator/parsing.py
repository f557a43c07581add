"""Defensive JSON extraction from free-form model output.

Models asked for JSON still wrap it in Markdown fences, prepend a
sentence of commentary, or leave a trailing comma behind.  The
extraction below walks from the cheapest interpretation to the most
invasive one and gives up with ``None`` instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

log = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "„": '"'})


def extract_json(raw: str) -> Optional[dict]:
    """Return the JSON object embedded in *raw*, or ``None``.

    A top-level JSON array is wrapped as ``{"items": [...]}``.
    """
    if not raw or not raw.strip():
        return None

    for candidate in _candidates(raw):
        parsed = _loads(candidate)
        if parsed is None:
            parsed = _loads(_repair(candidate))
        if parsed is not None:
            return parsed

    log.warning("No JSON object found in model output: %.200s", raw)
    return None


def _candidates(raw: str) -> list[str]:
    text = raw.strip()
    candidates = [text]

    fenced = _FENCE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())

    span = _outer_span(text, "{", "}")
    if span:
        candidates.append(span)
    array_span = _outer_span(text, "[", "]")
    if array_span:
        candidates.append(array_span)

    seen: set[str] = set()
    unique = []
    for c in candidates:
        if c and c not in seen:
            seen.add(c)
            unique.append(c)
    return unique


def _outer_span(text: str, opening: str, closing: str) -> Optional[str]:
    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def _repair(text: str) -> str:
    text = text.translate(_SMART_QUOTES)
    return _TRAILING_COMMA.sub(r"\1", text)


def _loads(text: str) -> Optional[dict]:
    try:
        value: Any = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {"items": value}
    return None


def pick_list(parsed: Optional[dict], key: str) -> list:
    """``parsed[key]`` if it is a list, else a wrapped bare array, else ``[]``."""
    if not parsed:
        return []
    value = parsed.get(key)
    if isinstance(value, list):
        return value
    items = parsed.get("items")
    if isinstance(items, list):
        return items
    return []
