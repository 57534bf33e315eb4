"""Utilities for pulling JSON out of LLM replies and for JSON-text columns."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Union

JsonShape = Literal["object", "array"]

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_DELIMITERS = {"object": ("{", "}"), "array": ("[", "]")}


@dataclass(frozen=True)
class ParsedJson:
    value: Any


@dataclass(frozen=True)
class UnparseableJson:
    raw_text: str
    reason: str = "no_json_found"


ExtractResult = Union[ParsedJson, UnparseableJson]


def _sanitize_controls(text: str) -> str:
    return _CONTROL_CHARS_RE.sub("", (text or "").replace("\ufeff", ""))


def extract_json(raw_text: str, shape: JsonShape = "object") -> ExtractResult:
    """
    Greedy extraction: parse the span between the first opening and the last
    closing delimiter of the requested shape. Never raises.
    """
    opening, closing = _DELIMITERS[shape]
    text = _sanitize_controls(raw_text)
    start = text.find(opening)
    end = text.rfind(closing)
    if start < 0 or end <= start:
        return UnparseableJson(raw_text=raw_text or "")

    try:
        value = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return UnparseableJson(raw_text=raw_text or "", reason="invalid_json")

    expected = dict if shape == "object" else list
    if not isinstance(value, expected):
        return UnparseableJson(raw_text=raw_text or "", reason=f"json_root_must_be_{shape}")
    return ParsedJson(value=value)


def loads_text(value: str | None, default: Any = None) -> Any:
    """Decode a JSON-text column, falling back to `default` for empty or corrupt values."""
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return default


def dumps_text(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)
